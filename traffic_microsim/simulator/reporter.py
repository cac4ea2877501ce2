"""
Reporte del estado de la simulación paso a paso.

El reporter recibe la instantánea que genera TrafficSimulator después de
cada paso, la imprime en formato legible y la guarda en un historial que
luego puede exportarse a pandas o graficarse con matplotlib.
"""

import sys
from typing import Dict, List, Optional, TextIO, Tuple

import matplotlib.pyplot as plt
import pandas as pd


class StateReporter:
    """
    Imprime y registra instantáneas de la simulación.

    Por cada paso se muestra el número de paso, el tiempo y, para cada vía
    con vehículos, sus vehículos (tipo, posición y velocidad redondeadas)
    y sus semáforos (posición y estado).
    """

    STATE_LABELS = {'green': 'verde', 'red': 'rojo'}

    def __init__(self, stream: Optional[TextIO] = None, verbose: bool = True,
                 keep_history: bool = True):
        """
        Args:
            stream: Destino de la salida (default: sys.stdout)
            verbose: Si False, sólo registra sin imprimir
            keep_history: Si True, guarda cada instantánea
        """
        self.stream = stream
        self.verbose = verbose
        self.keep_history = keep_history
        self.history: List[Dict] = []

    def report(self, snapshot: Dict):
        """
        Procesa la instantánea de un paso.

        Args:
            snapshot: Estado retornado por TrafficSimulator.get_current_state()
        """
        if self.keep_history:
            self.history.append(snapshot)
        if self.verbose:
            print(self.format_snapshot(snapshot), file=self.stream or sys.stdout)

    def format_snapshot(self, snapshot: Dict) -> str:
        """Arma el texto de una instantánea."""
        lines = [f"Paso: {snapshot['step']}", f"Tiempo: {snapshot['time']:.4f}", ""]

        for road in snapshot['roads']:
            # Sólo se listan vías con vehículos
            if not road['vehicles']:
                continue

            lines.append(f"Vía: {road['name']}")
            lines.append("")
            for index, vehicle in enumerate(road['vehicles'], start=1):
                lines.append(f"Vehículo {index}")
                lines.append(f"-> tipo: {vehicle['type']}")
                lines.append(f"-> posición: {vehicle['position']}")
                lines.append(f"-> velocidad: {vehicle['speed']}")
                lines.append("")

            for light in road['traffic_lights']:
                state = self.STATE_LABELS.get(light['state'], light['state'])
                lines.append(f"Semáforo en posición {light['position']:g} está {state}")
                lines.append("")

        lines.append("-" * 35)
        return "\n".join(lines)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Aplana el historial: una fila por vehículo y paso.

        Returns:
            pd.DataFrame: Columnas step, time, road, vehicle_id, type, position, speed
        """
        rows = []
        for snapshot in self.history:
            for road in snapshot['roads']:
                for vehicle in road['vehicles']:
                    rows.append({
                        'step': snapshot['step'],
                        'time': snapshot['time'],
                        'road': road['name'],
                        'vehicle_id': vehicle['id'],
                        'type': vehicle['type'],
                        'position': vehicle['position'],
                        'speed': vehicle['speed']
                    })

        columns = ['step', 'time', 'road', 'vehicle_id', 'type', 'position', 'speed']
        return pd.DataFrame(rows, columns=columns)

    def plot_trajectories(self, road_name: str, figsize: Tuple[int, int] = (10, 6)) -> plt.Figure:
        """
        Dibuja el diagrama espacio-tiempo de una vía.

        Args:
            road_name: Vía a graficar
            figsize: Tamaño de la figura

        Returns:
            plt.Figure: Figura de matplotlib
        """
        df = self.to_dataframe()
        df = df[df['road'] == road_name]

        fig, ax = plt.subplots(figsize=figsize)

        for vehicle_id, trajectory in df.groupby('vehicle_id'):
            vehicle_type = trajectory['type'].iloc[0]
            ax.plot(trajectory['time'], trajectory['position'],
                    linewidth=1.5, label=f"#{vehicle_id} ({vehicle_type})")

        # Semáforos: líneas horizontales en su posición
        for snapshot in self.history[:1]:
            for road in snapshot['roads']:
                if road['name'] != road_name:
                    continue
                for light in road['traffic_lights']:
                    ax.axhline(light['position'], color='red', linestyle='--', alpha=0.5)

        ax.set_title(f"Trayectorias en {road_name}", fontsize=12, fontweight='bold')
        ax.set_xlabel("Tiempo (s)")
        ax.set_ylabel("Posición")
        ax.grid(True, alpha=0.3)
        if 0 < df['vehicle_id'].nunique() <= 10:
            ax.legend(fontsize=8)

        plt.tight_layout()
        return fig

    def clear(self):
        """Vacía el historial."""
        self.history.clear()
