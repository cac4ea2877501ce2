"""
Sistema de métricas y análisis de resultados.

Este módulo proporciona funciones para calcular y comparar métricas
de desempeño a partir de los vehículos que completaron su recorrido.
"""

from typing import List, Dict
import numpy as np
import pandas as pd


class MetricsCalculator:
    """
    Calculadora de métricas de evaluación para simulaciones de tráfico.

    Proporciona métodos estáticos para calcular diversas métricas
    de rendimiento del sistema.
    """

    @staticmethod
    def average_travel_time(vehicles: List) -> float:
        """
        Calcula el tiempo de viaje promedio (salida - aparición).

        Args:
            vehicles: Lista de vehículos que salieron de la red

        Returns:
            float: Tiempo promedio en segundos
        """
        times = [v.exit_time - v.spawn_time for v in vehicles if v.exit_time is not None]
        if not times:
            return 0.0

        return float(np.mean(times))

    @staticmethod
    def average_waiting_time(vehicles: List) -> float:
        """
        Calcula el tiempo promedio detenido por vehículo.

        Args:
            vehicles: Lista de vehículos completados

        Returns:
            float: Espera promedio en segundos
        """
        if not vehicles:
            return 0.0

        return float(np.mean([v.total_waiting_time for v in vehicles]))

    @staticmethod
    def percentile_waiting_time(vehicles: List, percentile: float = 95) -> float:
        """
        Calcula el percentil del tiempo de espera.

        Args:
            vehicles: Lista de vehículos completados
            percentile: Percentil a calcular (0-100)

        Returns:
            float: Espera en el percentil dado
        """
        if not vehicles:
            return 0.0

        return float(np.percentile([v.total_waiting_time for v in vehicles], percentile))

    @staticmethod
    def average_dwell_time(vehicles: List) -> float:
        """Tiempo promedio en paradas, sólo sobre buses."""
        dwell = [v.dwell_time for v in vehicles if v.is_bus]
        return float(np.mean(dwell)) if dwell else 0.0

    @staticmethod
    def throughput(vehicles: List, simulation_time: float) -> float:
        """
        Calcula el throughput (vehículos que salen por hora).

        Args:
            vehicles: Lista de vehículos completados
            simulation_time: Tiempo total de simulación en segundos

        Returns:
            float: Vehículos por hora
        """
        if simulation_time <= 0:
            return 0.0

        return (len(vehicles) / simulation_time) * 3600

    @staticmethod
    def average_stops(vehicles: List) -> float:
        """
        Calcula el número promedio de detenciones por vehículo.

        Args:
            vehicles: Lista de vehículos completados

        Returns:
            float: Número promedio de detenciones
        """
        if not vehicles:
            return 0.0

        return float(np.mean([v.num_stops for v in vehicles]))

    @staticmethod
    def average_speed(vehicles: List) -> float:
        """
        Calcula la velocidad promedio de los vehículos.

        Args:
            vehicles: Lista de vehículos completados

        Returns:
            float: Velocidad promedio en unidades/s
        """
        if not vehicles:
            return 0.0

        return float(np.mean([v.get_average_speed() for v in vehicles]))

    @staticmethod
    def switch_rate(vehicles: List) -> float:
        """Fracción de vehículos que cambiaron de vía al menos una vez."""
        if not vehicles:
            return 0.0

        return float(np.mean([v.num_switches > 0 for v in vehicles]))

    def calculate_all_metrics(self, vehicles: List, simulation_time: float) -> Dict:
        """
        Calcula todas las métricas de una corrida.

        Args:
            vehicles: Vehículos que salieron de la red
            simulation_time: Tiempo simulado total

        Returns:
            dict: Métricas agregadas
        """
        return {
            'vehicles_completed': len(vehicles),
            'avg_travel_time': self.average_travel_time(vehicles),
            'avg_waiting_time': self.average_waiting_time(vehicles),
            'p95_waiting_time': self.percentile_waiting_time(vehicles, 95),
            'avg_dwell_time': self.average_dwell_time(vehicles),
            'avg_stops': self.average_stops(vehicles),
            'avg_speed': self.average_speed(vehicles),
            'switch_rate': self.switch_rate(vehicles),
            'throughput_per_hour': self.throughput(vehicles, simulation_time)
        }

    @staticmethod
    def create_vehicle_dataframe(vehicles: List) -> pd.DataFrame:
        """
        Crea un DataFrame con las estadísticas de cada vehículo.

        Args:
            vehicles: Lista de vehículos

        Returns:
            pd.DataFrame: Una fila por vehículo
        """
        return pd.DataFrame([v.get_statistics() for v in vehicles])

    @staticmethod
    def create_summary_dataframe(results: Dict[str, Dict]) -> pd.DataFrame:
        """
        Crea un DataFrame con resumen comparativo de escenarios.

        Args:
            results: Dict {scenario_name: metrics_dict}

        Returns:
            pd.DataFrame: DataFrame con métricas comparadas
        """
        data = []

        for name, metrics in results.items():
            data.append({
                'Scenario': name,
                'Avg Travel Time (s)': metrics.get('avg_travel_time', 0),
                'Avg Waiting (s)': metrics.get('avg_waiting_time', 0),
                'Avg Stops': metrics.get('avg_stops', 0),
                'Avg Speed': metrics.get('avg_speed', 0),
                'Throughput (veh/h)': metrics.get('throughput_per_hour', 0),
                'Completed Vehicles': metrics.get('vehicles_completed', 0),
                'Steps': metrics.get('steps', 0)
            })

        df = pd.DataFrame(data)

        # Ordenar por tiempo de viaje (menor es mejor)
        if not df.empty:
            df = df.sort_values('Avg Travel Time (s)')

        return df

    @staticmethod
    def calculate_improvement(baseline_metrics: Dict, candidate_metrics: Dict) -> Dict:
        """
        Calcula mejoras porcentuales respecto a una corrida de referencia.

        Args:
            baseline_metrics: Métricas de referencia
            candidate_metrics: Métricas a comparar

        Returns:
            dict: Diccionario con mejoras porcentuales
        """
        improvements = {}

        # Métricas donde menor es mejor
        for metric in ['avg_travel_time', 'avg_waiting_time', 'avg_stops']:
            baseline_val = baseline_metrics.get(metric, 0)
            candidate_val = candidate_metrics.get(metric, 0)

            if baseline_val > 0:
                improvements[metric] = ((baseline_val - candidate_val) / baseline_val) * 100
            else:
                improvements[metric] = 0.0

        # Métricas donde mayor es mejor
        for metric in ['throughput_per_hour', 'avg_speed']:
            baseline_val = baseline_metrics.get(metric, 0)
            candidate_val = candidate_metrics.get(metric, 0)

            if baseline_val > 0:
                improvements[metric] = ((candidate_val - baseline_val) / baseline_val) * 100
            else:
                improvements[metric] = 0.0

        return improvements
