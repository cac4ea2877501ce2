"""
Tests para paradas de bus (BusStop) y su efecto sobre una vía.
"""

import dataclasses

import pytest
import sys
from pathlib import Path

# Agregar el proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

from traffic_microsim.simulator.bus_stop import BusStop
from traffic_microsim.simulator.errors import ContractViolation
from traffic_microsim.simulator.traffic_network import Road
from traffic_microsim.simulator.vehicle import Vehicle
from traffic_microsim.utils.config import SimulatorConfig


class TestBusStop:
    """Tests para la clase BusStop."""

    def test_stop_creation(self):
        """Test de creación de parada."""
        stop = BusStop("A", 120, 5)

        assert stop.road_name == "A"
        assert stop.position == 120
        assert stop.wait_time == 5

    def test_stop_is_immutable(self):
        """Test de inmutabilidad."""
        stop = BusStop("A", 120, 5)

        with pytest.raises(dataclasses.FrozenInstanceError):
            stop.wait_time = 10

    def test_invalid_arguments(self):
        """Test de validación."""
        with pytest.raises(ContractViolation):
            BusStop("", 10, 1)
        with pytest.raises(ContractViolation):
            BusStop("A", -5, 1)
        with pytest.raises(ContractViolation):
            BusStop("A", 10, -1)


class TestBusStopOnRoad:
    """Tests de espera de buses durante la actualización de la vía."""

    def setup_road(self, vehicle_type):
        road = Road("A", 200)
        road.add_bus_stop(BusStop("A", 50.2, 0.05))
        vehicle = Vehicle("A", position=50.0, vehicle_type=vehicle_type)
        road.add_vehicle(vehicle)
        return road, vehicle

    def test_bus_waits_then_resumes(self):
        """Test de bus detenido durante la espera y luego en marcha."""
        road, bus = self.setup_road("bus")
        dt = SimulatorConfig.TIME_STEP

        for tick in range(3):
            road.update(dt, tick)
            assert bus.speed == 0.0
            assert bus.position == 50.0
            assert bus.is_waiting

        road.update(dt, 3)

        assert not bus.is_waiting
        assert bus.speed > 0
        assert bus.position > 50.0
        assert bus.dwell_time == pytest.approx(3 * dt)

    def test_car_ignores_stop(self):
        """Test de auto que no se detiene en la parada."""
        road, car = self.setup_road("car")

        road.update(SimulatorConfig.TIME_STEP, 0)

        assert car.speed > 0
        assert not car.is_waiting


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
