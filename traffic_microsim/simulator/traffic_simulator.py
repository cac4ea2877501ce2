"""
Motor principal de simulación de tráfico vehicular.

Este módulo implementa el simulador que coordina todos los componentes:
vías, semáforos, intersecciones y generadores de vehículos, avanzando el
reloj en pasos discretos de duración fija.
"""

from typing import Dict, List, Optional
import logging
import time as timer

from .errors import ContractViolation
from .traffic_generator import VehicleGenerator
from .traffic_network import TrafficNetwork
from .vehicle import Vehicle
from ..utils.config import SimulatorConfig
from ..utils.metrics import MetricsCalculator

logger = logging.getLogger(__name__)


class TrafficSimulator:
    """
    Motor principal de simulación de tráfico.

    Cada paso actualiza las vías (en orden de vía y luego de vehículo),
    después los semáforos con el tiempo actual y por último los
    generadores; recién entonces avanza el reloj.
    """

    def __init__(self, network: TrafficNetwork,
                 generators: Optional[List[VehicleGenerator]] = None,
                 time_step: float = SimulatorConfig.TIME_STEP,
                 seed: Optional[int] = None):
        """
        Inicializa el simulador.

        Args:
            network: Red vial con vías, semáforos, paradas e intersecciones
            generators: Generadores de vehículos (opcional)
            time_step: Duración de cada paso (segundos)
            seed: Semilla para el generador aleatorio de la red (opcional)

        Raises:
            ContractViolation: Si el paso de tiempo no es positivo
        """
        if time_step <= 0:
            raise ContractViolation("Simulation", f"El paso de tiempo debe ser positivo: {time_step}")

        self.network = network
        self.generators: List[VehicleGenerator] = list(generators or [])
        self.dt = time_step

        if seed is not None:
            self.network.set_random_seed(seed)

        # Estado de simulación
        self.current_time = 0.0
        self.step_count = 0

        # Vehículos que salieron de la red
        self.completed_vehicles: List[Vehicle] = []
        self.total_vehicles_generated = 0

        # Historial de vehículos en circulación por paso
        self.vehicle_count_history: List[int] = []

        self.real_time_start = None
        self.computation_time = 0.0

        logger.info("Simulador inicializado: %d vías, %d generadores",
                    len(network.roads), len(self.generators))

    def add_generator(self, generator: VehicleGenerator):
        """Registra un generador de vehículos."""
        self.generators.append(generator)

    def step(self):
        """
        Ejecuta un paso de simulación.

        Este es el método central que coordina todas las actualizaciones.
        """
        # 1. Actualizar vías
        for road in list(self.network.roads.values()):
            exited = road.update(self.dt, self.step_count, self.current_time)
            self.completed_vehicles.extend(exited)

        # 2. Actualizar semáforos
        for light in self.network.get_all_traffic_lights():
            light.update(self.current_time)

        # 3. Generar nuevos vehículos
        for generator in self.generators:
            if generator.update(self.current_time) is not None:
                self.total_vehicles_generated += 1

        self.vehicle_count_history.append(self.network.get_vehicle_count())

        # 4. Avanzar tiempo
        self.current_time += self.dt
        self.step_count += 1

    def run(self, max_steps: Optional[int] = None, reporter=None,
            verbose: bool = False) -> Dict:
        """
        Ejecuta la simulación hasta que no queden vehículos en las vías.

        Args:
            max_steps: Presupuesto de pasos (None = sin límite)
            reporter: Objeto con método report(snapshot), invocado tras
                      cada paso que no termina la corrida
            verbose: Si True, imprime progreso

        Returns:
            dict: Métricas finales de la simulación
        """
        if max_steps is not None and max_steps < 0:
            raise ContractViolation("Simulation", f"Presupuesto de pasos negativo: {max_steps}")

        self.real_time_start = timer.time()
        steps_run = 0

        while max_steps is None or steps_run < max_steps:
            self.step()
            steps_run += 1

            if self.network.is_empty():
                logger.info("Simulación terminada: no quedan vehículos en las vías (paso %d)",
                            self.step_count)
                break

            if max_steps is not None and steps_run >= max_steps:
                logger.info("Simulación detenida: presupuesto de %d pasos agotado", max_steps)
                break

            if reporter is not None:
                reporter.report(self.get_current_state())

            if verbose and self.step_count % 1000 == 0:
                self._print_progress()

        self.computation_time = timer.time() - self.real_time_start

        metrics = self.calculate_final_metrics()
        if verbose:
            self._print_summary(metrics)

        return metrics

    def get_current_state(self) -> Dict:
        """
        Retorna una instantánea del estado actual.

        Returns:
            dict: Paso, tiempo y, por vía, vehículos y semáforos
        """
        roads = []
        for road in self.network.roads.values():
            roads.append({
                'name': road.name,
                'length': road.length,
                'vehicles': [
                    {
                        'id': vehicle.id,
                        'type': vehicle.vehicle_type.value,
                        'position': int(round(vehicle.position)),
                        'speed': round(vehicle.speed, SimulatorConfig.SPEED_DECIMALS)
                    }
                    for vehicle in road.vehicles.values()
                ],
                'traffic_lights': [
                    {'position': light.position, 'state': light.get_status()}
                    for light in road.traffic_lights
                ]
            })

        return {
            'step': self.step_count,
            'time': self.current_time,
            'roads': roads
        }

    def calculate_final_metrics(self) -> Dict:
        """
        Calcula métricas finales de la simulación.

        Returns:
            dict: Diccionario con todas las métricas
        """
        calculator = MetricsCalculator()
        metrics = calculator.calculate_all_metrics(self.completed_vehicles, self.current_time)

        counts = self.vehicle_count_history
        metrics.update({
            'avg_vehicles_on_network': sum(counts) / len(counts) if counts else 0.0,
            'max_vehicles_on_network': max(counts) if counts else 0,
            'vehicles_active': self.network.get_vehicle_count(),
            'vehicles_generated': self.total_vehicles_generated,
            'total_switches': sum(i.total_switches for i in self.network.intersections),
            'steps': self.step_count,
            'simulation_time': self.current_time,
            'computation_time': self.computation_time
        })
        return metrics

    def _print_progress(self):
        """Imprime progreso de la simulación."""
        print(f"[paso {self.step_count:6d} | t={self.current_time:8.2f}s] "
              f"Activos: {self.network.get_vehicle_count():3d} | "
              f"Completados: {len(self.completed_vehicles):3d} | "
              f"Generados: {self.total_vehicles_generated:3d}")

    def _print_summary(self, metrics: Dict):
        """
        Imprime resumen de métricas finales.

        Args:
            metrics: Diccionario de métricas
        """
        print(f"\n{'='*70}")
        print("SIMULACIÓN COMPLETADA")
        print(f"{'='*70}")

        print("\nVehículos:")
        print(f"  Generados:   {metrics['vehicles_generated']}")
        print(f"  Completados: {metrics['vehicles_completed']}")
        print(f"  Activos:     {metrics['vehicles_active']}")
        print(f"  Cambios de vía: {metrics['total_switches']}")
        print(f"  Throughput:  {metrics['throughput_per_hour']:.1f} veh/hora")

        print("\nTiempos:")
        print(f"  Viaje promedio:       {metrics['avg_travel_time']:.2f} s")
        print(f"  Espera promedio:      {metrics['avg_waiting_time']:.2f} s")
        print(f"  Velocidad promedio:   {metrics['avg_speed']:.2f} u/s")
        print(f"  Paradas promedio:     {metrics['avg_stops']:.2f} paradas/vehículo")

        print("\nRendimiento:")
        print(f"  Pasos:                {metrics['steps']}")
        print(f"  Tiempo de simulación: {metrics['simulation_time']:.2f} s")
        print(f"  Tiempo de cómputo:    {metrics['computation_time']:.2f} s")

    def reset(self):
        """Reinicia reloj y estadísticas (las vías conservan sus vehículos)."""
        self.current_time = 0.0
        self.step_count = 0
        self.completed_vehicles.clear()
        self.vehicle_count_history.clear()
        self.total_vehicles_generated = 0
        self.computation_time = 0.0

        for generator in self.generators:
            generator.reset()
        for light in self.network.get_all_traffic_lights():
            light.reset()
