"""
Tests para el módulo de vehículos (Vehicle).
"""

import pytest
import sys
from pathlib import Path

# Agregar el proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

from traffic_microsim.simulator.errors import ContractViolation
from traffic_microsim.simulator.traffic_light import LightState, TrafficLight
from traffic_microsim.simulator.vehicle import (
    VEHICLE_PARAMETERS,
    Vehicle,
    VehicleState,
    VehicleType,
)
from traffic_microsim.utils.config import SimulatorConfig, VehicleConfig


def red_light(position, road_name="A"):
    light = TrafficLight(road_name, position, cycle=1000)
    light.state = LightState.RED
    return light


class TestVehicleCreation:
    """Tests de construcción de Vehicle."""

    def test_vehicle_creation(self):
        """Test de creación básica de vehículo."""
        vehicle = Vehicle("A", position=10.0)

        assert vehicle.road_name == "A"
        assert vehicle.position == 10.0
        assert vehicle.speed == 0.0
        assert vehicle.vehicle_type == VehicleType.CAR
        assert vehicle.state == VehicleState.MOVING
        assert vehicle.length == VehicleConfig.VEHICLE_LENGTH

    def test_unique_ids(self):
        """Test de IDs únicos para vehículos."""
        v1 = Vehicle("A")
        v2 = Vehicle("A")

        assert v1.id != v2.id

    def test_type_from_tag(self):
        """Test de conversión de etiquetas de tipo."""
        vehicle = Vehicle("A", vehicle_type="fire-truck")

        assert vehicle.vehicle_type == VehicleType.FIRE_TRUCK
        assert not vehicle.is_bus
        assert Vehicle("A", vehicle_type="bus").is_bus

    def test_invalid_type(self):
        """Test de tipo de vehículo desconocido."""
        with pytest.raises(ContractViolation) as exc_info:
            Vehicle("A", vehicle_type="tractor")

        assert exc_info.value.component == "Vehicle"

    def test_invalid_arguments(self):
        """Test de argumentos inválidos."""
        with pytest.raises(ContractViolation):
            Vehicle("")
        with pytest.raises(ContractViolation):
            Vehicle("A", position=-1.0)
        with pytest.raises(ContractViolation):
            Vehicle("A", speed=VehicleConfig.MAX_SPEED + 1)

    def test_all_types_share_parameters(self):
        """Test de constantes físicas por tipo."""
        for vehicle_type in VehicleType:
            params = VEHICLE_PARAMETERS[vehicle_type]
            assert params['max_speed'] == VehicleConfig.MAX_SPEED
            assert params['max_braking'] == VehicleConfig.MAX_BRAKING


class TestAcceleration:
    """Tests del modelo de seguimiento vehicular."""

    def test_free_road_from_rest(self):
        """Test de aceleración libre desde reposo."""
        vehicle = Vehicle("A")

        acceleration = vehicle.compute_acceleration(None)

        assert acceleration > 0
        assert acceleration == pytest.approx(VehicleConfig.MAX_ACCELERATION)

    def test_free_road_at_max_speed(self):
        """Test de aceleración nula a velocidad máxima."""
        vehicle = Vehicle("A", speed=VehicleConfig.MAX_SPEED)

        assert vehicle.compute_acceleration(None) == pytest.approx(0.0)

    def test_following_leader(self):
        """Test de aceleración detrás de un líder detenido."""
        follower = Vehicle("A", position=0.0)
        leader = Vehicle("A", position=10.0)

        # gap = 6, s* = 4 -> a = amax * (1 - (4/6)^2)
        expected = VehicleConfig.MAX_ACCELERATION * (1 - (4 / 6) ** 2)
        assert follower.compute_acceleration(leader) == pytest.approx(expected)

    def test_zero_gap_is_floored(self):
        """Test de separación nula sin división por cero."""
        follower = Vehicle("A", position=10.0)
        leader = Vehicle("A", position=14.0)

        acceleration = follower.compute_acceleration(leader)

        assert acceleration < 0
        assert acceleration == pytest.approx(
            VehicleConfig.MAX_ACCELERATION * (1 - (4.0 / VehicleConfig.MIN_GAP) ** 2)
        )

    def test_fast_approach_brakes_harder(self):
        """Test de mayor frenada al acercarse rápido al líder."""
        slow = Vehicle("A", position=0.0, speed=2.0)
        fast = Vehicle("A", position=0.0, speed=12.0)
        leader = Vehicle("A", position=30.0)

        assert fast.compute_acceleration(leader) < slow.compute_acceleration(leader)


class TestTrafficLightRules:
    """Tests de respuesta a semáforos."""

    def test_red_light_ahead(self):
        """Test de frenado ante rojo dentro de la distancia de frenado."""
        vehicle = Vehicle("A", position=90.0, speed=5.0)
        vehicle.compute_acceleration(None)

        acceleration = vehicle.apply_traffic_light_rules([red_light(100.0)])

        assert acceleration == pytest.approx(-VehicleConfig.MAX_BRAKING)
        assert vehicle.state == VehicleState.BRAKING

    def test_green_light_ignored(self):
        """Test de semáforo en verde sin efecto."""
        vehicle = Vehicle("A", position=90.0)
        free = vehicle.compute_acceleration(None)

        assert vehicle.apply_traffic_light_rules([TrafficLight("A", 100.0, 10)]) == free

    def test_red_light_out_of_range(self):
        """Test de semáforos lejanos o ya pasados."""
        vehicle = Vehicle("A", position=50.0)
        free = vehicle.compute_acceleration(None)

        lights = [red_light(80.0), red_light(40.0), red_light(50.0)]

        assert vehicle.apply_traffic_light_rules(lights) == free
        assert vehicle.state == VehicleState.MOVING

    def test_strongest_braking_wins(self):
        """Test de varios semáforos en rojo: se aplica la frenada más fuerte."""
        vehicle = Vehicle("A", position=90.0, speed=5.0)
        vehicle.compute_acceleration(None)

        acceleration = vehicle.apply_traffic_light_rules([red_light(104.0), red_light(92.0)])

        assert acceleration <= -VehicleConfig.MAX_BRAKING


class TestIntegration:
    """Tests de integración cinemática."""

    def test_integrate_from_rest(self):
        """Test de movimiento desde reposo."""
        vehicle = Vehicle("A")
        vehicle.compute_acceleration(None)

        vehicle.integrate(SimulatorConfig.TIME_STEP)

        assert vehicle.speed > 0
        assert vehicle.position > 0
        assert vehicle.distance_traveled == pytest.approx(vehicle.position)

    def test_speed_capped(self):
        """Test de velocidad acotada por vmax."""
        vehicle = Vehicle("A", speed=VehicleConfig.MAX_SPEED)
        vehicle.acceleration = VehicleConfig.MAX_ACCELERATION

        vehicle.integrate(1.0)

        assert vehicle.speed == VehicleConfig.MAX_SPEED

    def test_overshoot_stops_vehicle(self):
        """Test de frenado que llevaría la velocidad a negativa."""
        vehicle = Vehicle("A", position=10.0, speed=1.0)
        vehicle.acceleration = -VehicleConfig.MAX_BRAKING

        vehicle.integrate(1.0)

        assert vehicle.speed == 0.0
        assert vehicle.position == pytest.approx(10.0 + 1.0 / (2 * VehicleConfig.MAX_BRAKING))
        assert vehicle.state == VehicleState.STOPPED

    def test_position_never_decreases(self):
        """Test de desplazamiento no negativo al frenar."""
        vehicle = Vehicle("A", position=10.0, speed=0.05)
        vehicle.acceleration = -3.0

        for _ in range(50):
            previous = vehicle.position
            vehicle.integrate(SimulatorConfig.TIME_STEP)
            assert vehicle.position >= previous
            assert 0 <= vehicle.speed <= vehicle.max_speed

    def test_invalid_time_step(self):
        """Test de paso de tiempo no positivo."""
        vehicle = Vehicle("A")

        with pytest.raises(ContractViolation):
            vehicle.integrate(0)


class TestDwell:
    """Tests de espera en paradas de bus."""

    def test_car_never_dwells(self):
        """Test de que sólo los buses esperan."""
        car = Vehicle("A", position=100.0, speed=5.0)

        assert not car.evaluate_dwell(100.0, 10.0)
        assert car.speed == 5.0

    def test_bus_dwell_cycle(self):
        """Test de espera de un bus hasta cumplir la duración."""
        bus = Vehicle("A", position=100.0, vehicle_type="bus", speed=3.0)
        dt = SimulatorConfig.TIME_STEP

        # 0.0166, 0.0332 < 0.04 -> espera; 0.0498 >= 0.04 -> sigue
        assert bus.evaluate_dwell(100.2, 0.04, dt)
        assert bus.speed == 0.0
        assert bus.state == VehicleState.WAITING_AT_STOP
        assert bus.evaluate_dwell(100.2, 0.04, dt)
        assert not bus.evaluate_dwell(100.2, 0.04, dt)

    def test_bus_far_from_stop_resets(self):
        """Test de reinicio del acumulador fuera de la parada."""
        bus = Vehicle("A", position=50.0, vehicle_type="bus")

        assert not bus.evaluate_dwell(100.0, 5.0)
        assert bus.dwell_timers[100.0] == 0.0

    def test_bus_resumes_after_dwell(self):
        """Test de que el bus arranca desde velocidad 0 tras la espera."""
        bus = Vehicle("A", position=100.0, vehicle_type="bus", speed=3.0)
        dt = SimulatorConfig.TIME_STEP

        while bus.evaluate_dwell(100.0, 0.05, dt):
            assert bus.speed == 0.0

        bus.compute_acceleration(None)
        bus.integrate(dt)

        assert bus.speed > 0
        assert bus.position > 100.0

    def test_relocate_clears_dwell(self):
        """Test de cambio de vía."""
        bus = Vehicle("A", position=100.0, vehicle_type="bus")
        bus.evaluate_dwell(100.0, 5.0)

        bus.relocate("B", 20.0)

        assert bus.road_name == "B"
        assert bus.position == 20.0
        assert bus.dwell_timers == {}
        assert bus.num_switches == 1


class TestStatistics:
    """Tests de estadísticas del vehículo."""

    def test_stop_counting(self):
        """Test de conteo de detenciones."""
        vehicle = Vehicle("A", speed=5.0)

        vehicle.update_statistics(1.0)
        vehicle.speed = 0.0
        vehicle.update_statistics(1.0)
        vehicle.update_statistics(1.0)

        assert vehicle.num_stops == 1
        assert vehicle.total_waiting_time == 2.0

    def test_exit_and_travel_time(self):
        """Test de salida y tiempo de viaje."""
        vehicle = Vehicle("A", spawn_time=2.0)
        vehicle.distance_traveled = 100.0

        vehicle.mark_exited(12.0)

        assert vehicle.has_exited()
        assert vehicle.get_travel_time(50.0) == 10.0
        assert vehicle.get_average_speed() == pytest.approx(10.0)

        stats = vehicle.get_statistics()
        assert stats['exited']
        assert stats['travel_time'] == 10.0

    def test_status_string(self):
        """Test de representación legible del estado."""
        vehicle = Vehicle("Av. Italia", position=42.3, speed=7.5, vehicle_type="bus")

        status = vehicle.get_status_string()

        assert f"Vehículo #{vehicle.id} (bus)" in status
        assert "Estado: MOVING" in status
        assert "Vía: Av. Italia" in status
        assert "Posición: 42.3" in status
        assert "Velocidad: 7.5" in status

        vehicle.mark_exited(10.0)
        assert vehicle.get_status_string().endswith("SALIÓ DE LA RED")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
