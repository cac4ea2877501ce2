"""
Tests para el módulo de semáforos (TrafficLight).
"""

import pytest
import sys
from pathlib import Path

# Agregar el proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

from traffic_microsim.simulator.errors import ContractViolation
from traffic_microsim.simulator.traffic_light import LightState, TrafficLight


class TestTrafficLight:
    """Tests para la clase TrafficLight."""

    def test_light_creation(self):
        """Test de creación de semáforo."""
        light = TrafficLight("A", 150, cycle=10)

        assert light.road_name == "A"
        assert light.position == 150.0
        assert light.cycle == 10.0
        assert light.state == LightState.GREEN
        assert light.last_switch_time == 0.0
        assert light.is_green()

    def test_invalid_arguments(self):
        """Test de validación de argumentos."""
        with pytest.raises(ContractViolation):
            TrafficLight("", 10, 5)
        with pytest.raises(ContractViolation):
            TrafficLight("A", -1, 5)
        with pytest.raises(ContractViolation):
            TrafficLight("A", 10, 0)

    def test_no_switch_before_cycle(self):
        """Test de que el estado se mantiene antes del ciclo."""
        light = TrafficLight("A", 100, cycle=10)

        light.update(0.0)
        light.update(5.0)
        light.update(9.99)

        assert light.is_green()
        assert light.total_switches == 0

    def test_red_at_cycle_green_at_double_cycle(self):
        """Test de rojo en t=C y verde en t=2C."""
        light = TrafficLight("A", 100, cycle=10)

        light.update(10.0)
        assert light.state == LightState.RED
        assert light.get_status() == "red"
        assert light.last_switch_time == 10.0

        light.update(20.0)
        assert light.state == LightState.GREEN
        assert light.total_switches == 2

    def test_time_regression_rejected(self):
        """Test de tiempo que retrocede."""
        light = TrafficLight("A", 100, cycle=10)
        light.update(12.0)

        with pytest.raises(ContractViolation):
            light.update(5.0)

    def test_negative_time_rejected(self):
        """Test de tiempo negativo."""
        light = TrafficLight("A", 100, cycle=10)

        with pytest.raises(ContractViolation):
            light.update(-0.1)

    def test_time_until_switch(self):
        """Test de tiempo restante hasta el próximo cambio."""
        light = TrafficLight("A", 100, cycle=10)

        assert light.get_time_until_switch(4.0) == pytest.approx(6.0)
        assert light.get_time_until_switch(15.0) == 0.0

    def test_reset(self):
        """Test de reinicio."""
        light = TrafficLight("A", 100, cycle=1)
        light.update(1.0)

        light.reset()

        assert light.is_green()
        assert light.last_switch_time == 0.0
        assert light.total_switches == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
