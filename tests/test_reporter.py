"""
Tests para el reporte de estado (StateReporter).
"""

import io

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import pytest
import sys
from pathlib import Path

# Agregar el proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

from traffic_microsim.simulator.reporter import StateReporter
from traffic_microsim.simulator.traffic_network import TrafficNetwork
from traffic_microsim.simulator.traffic_simulator import TrafficSimulator


@pytest.fixture
def simulator():
    network = TrafficNetwork("reporte")
    network.add_road("A", 200)
    network.add_road("Vacía", 100)
    network.add_traffic_light("A", 150, cycle=10)
    network.add_traffic_light("Vacía", 50, cycle=10)
    network.add_vehicle("A", 20)
    network.add_vehicle("A", 0, "bus")
    return TrafficSimulator(network)


class TestStateReporter:
    """Tests para la clase StateReporter."""

    def test_report_output(self, simulator):
        """Test del texto impreso por paso."""
        stream = io.StringIO()
        reporter = StateReporter(stream=stream)

        simulator.run(max_steps=3, reporter=reporter)
        output = stream.getvalue()

        assert "Paso: 1" in output
        assert "Paso: 2" in output
        assert "Vía: A" in output
        assert "Vehículo 2" in output
        assert "-> tipo: bus" in output
        assert "-> posición: 20" in output
        assert "Semáforo en posición 150 está verde" in output

    def test_empty_roads_skipped(self, simulator):
        """Test de vías vacías omitidas."""
        reporter = StateReporter(stream=io.StringIO())

        text = reporter.format_snapshot(simulator.get_current_state())

        assert "Vía: Vacía" not in text
        assert "posición 50" not in text

    def test_quiet_reporter_keeps_history(self, simulator):
        """Test de reporter silencioso."""
        stream = io.StringIO()
        reporter = StateReporter(stream=stream, verbose=False)

        simulator.run(max_steps=4, reporter=reporter)

        assert stream.getvalue() == ""
        assert len(reporter.history) == 3

    def test_to_dataframe(self, simulator):
        """Test de exportación a DataFrame."""
        reporter = StateReporter(verbose=False)
        simulator.run(max_steps=6, reporter=reporter)

        df = reporter.to_dataframe()

        assert list(df.columns) == ['step', 'time', 'road', 'vehicle_id', 'type',
                                    'position', 'speed']
        assert len(df) == 5 * 2
        assert set(df['road']) == {"A"}
        assert df.groupby('vehicle_id')['position'].is_monotonic_increasing.all()

    def test_empty_dataframe(self):
        """Test de historial vacío."""
        df = StateReporter(verbose=False).to_dataframe()

        assert df.empty
        assert 'vehicle_id' in df.columns

    def test_plot_trajectories(self, simulator):
        """Test del diagrama espacio-tiempo."""
        reporter = StateReporter(verbose=False)
        simulator.run(max_steps=20, reporter=reporter)

        fig = reporter.plot_trajectories("A")

        assert isinstance(fig, plt.Figure)
        assert len(fig.axes[0].lines) == 3  # 2 trayectorias + semáforo
        plt.close(fig)

    def test_clear(self, simulator):
        """Test de vaciado del historial."""
        reporter = StateReporter(verbose=False)
        simulator.run(max_steps=3, reporter=reporter)

        reporter.clear()

        assert reporter.history == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
