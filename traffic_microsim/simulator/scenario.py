"""
Carga de escenarios de simulación desde archivos JSON.

Un escenario describe vías, vehículos iniciales, semáforos, paradas de
bus, intersecciones y generadores. La validación es todo o nada: si el
archivo tiene algún problema se reportan todos juntos y no se construye
ninguna entidad.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ScenarioValidationError
from .traffic_generator import VehicleGenerator
from .traffic_network import RoadConnection, RoutingPolicy, TrafficNetwork
from .traffic_simulator import TrafficSimulator
from .vehicle import VehicleType
from ..utils.config import (
    IntersectionConfig,
    SimulatorConfig,
    TrafficLightConfig,
    VehicleConfig,
)

logger = logging.getLogger(__name__)

VALID_VEHICLE_TYPES = {t.value for t in VehicleType}
VALID_POLICIES = {p.value for p in RoutingPolicy}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _entries(data: Dict, key: str, errors: List[str]) -> List[Dict]:
    """Retorna la lista de entradas de una sección, registrando errores de forma."""
    section = data.get(key, [])
    if not isinstance(section, list):
        errors.append(f"'{key}' debe ser una lista")
        return []

    entries = []
    for index, entry in enumerate(section):
        if isinstance(entry, dict):
            entries.append(entry)
        else:
            errors.append(f"{key}[{index}]: se esperaba un objeto")
            entries.append({})
    return entries


def _check_placement(label: str, entry: Dict, road_lengths: Dict[str, float],
                     errors: List[str]) -> bool:
    """Valida 'road' y 'position' de una entrada. Retorna True si son válidos."""
    road = entry.get('road')
    position = entry.get('position')

    if not isinstance(road, str) or not road:
        errors.append(f"{label}: falta 'road'")
        return False
    if road not in road_lengths:
        errors.append(f"{label}: vía desconocida {road!r}")
        return False
    if not _is_number(position):
        errors.append(f"{label}: 'position' debe ser numérica")
        return False
    if not 0 <= position <= road_lengths[road]:
        errors.append(
            f"{label}: posición {position} fuera de la vía {road!r} "
            f"(longitud {road_lengths[road]:g})"
        )
        return False
    return True


def _check_vehicle_type(label: str, entry: Dict, errors: List[str]):
    vehicle_type = entry.get('type', VehicleType.CAR.value)
    if not isinstance(vehicle_type, str) or vehicle_type not in VALID_VEHICLE_TYPES:
        errors.append(f"{label}: tipo de vehículo desconocido {vehicle_type!r}")


def validate_scenario(data: Any) -> List[str]:
    """
    Valida la estructura completa de un escenario.

    Args:
        data: Contenido del escenario (dict deserializado)

    Returns:
        List[str]: Problemas encontrados (vacía si es válido)
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return ["El escenario debe ser un objeto JSON"]

    # Vías
    road_lengths: Dict[str, float] = {}
    roads = _entries(data, 'roads', errors)
    if not roads:
        errors.append("El escenario necesita al menos una vía")

    for index, road in enumerate(roads):
        label = f"roads[{index}]"
        name = road.get('name')
        length = road.get('length')

        if not isinstance(name, str) or not name:
            errors.append(f"{label}: falta 'name'")
            continue
        if name in road_lengths:
            errors.append(f"{label}: vía duplicada {name!r}")
            continue
        if not _is_number(length) or length <= 0:
            errors.append(f"{label}: 'length' debe ser un número positivo")
            continue
        road_lengths[name] = max(float(length), SimulatorConfig.MIN_ROAD_LENGTH)

    # Vehículos iniciales
    for index, vehicle in enumerate(_entries(data, 'vehicles', errors)):
        label = f"vehicles[{index}]"
        _check_placement(label, vehicle, road_lengths, errors)
        _check_vehicle_type(label, vehicle, errors)
        speed = vehicle.get('speed', 0)
        if not _is_number(speed) or not 0 <= speed <= VehicleConfig.MAX_SPEED:
            errors.append(f"{label}: 'speed' fuera de rango [0, {VehicleConfig.MAX_SPEED}]")

    # Semáforos
    light_positions: Dict[str, List[float]] = {}
    for index, light in enumerate(_entries(data, 'traffic_lights', errors)):
        label = f"traffic_lights[{index}]"
        if _check_placement(label, light, road_lengths, errors):
            light_positions.setdefault(light['road'], []).append(float(light['position']))
        cycle = light.get('cycle')
        if not _is_number(cycle) or cycle <= 0:
            errors.append(f"{label}: 'cycle' debe ser un número positivo")

    for road, positions in light_positions.items():
        positions.sort()
        for first, second in zip(positions, positions[1:]):
            if second - first < TrafficLightConfig.MIN_SEPARATION:
                errors.append(
                    f"Semáforos demasiado cercanos en {road!r}: {first:g} y {second:g} "
                    f"(mínimo {TrafficLightConfig.MIN_SEPARATION:g})"
                )

    # Paradas de bus
    for index, stop in enumerate(_entries(data, 'bus_stops', errors)):
        label = f"bus_stops[{index}]"
        _check_placement(label, stop, road_lengths, errors)
        wait_time = stop.get('wait_time')
        if not _is_number(wait_time) or wait_time < 0:
            errors.append(f"{label}: 'wait_time' debe ser un número no negativo")

    # Intersecciones
    for index, intersection in enumerate(_entries(data, 'intersections', errors)):
        label = f"intersections[{index}]"
        connections = intersection.get('connections')
        if not isinstance(connections, list) or len(connections) < 2:
            errors.append(f"{label}: se necesitan al menos 2 conexiones")
            continue

        valid = True
        for c_index, connection in enumerate(connections):
            c_label = f"{label}.connections[{c_index}]"
            if not isinstance(connection, dict):
                errors.append(f"{c_label}: se esperaba un objeto")
                valid = False
            elif not _check_placement(c_label, connection, road_lengths, errors):
                valid = False

        policy = intersection.get('policy', RoutingPolicy.FIXED_PROBABILITY.value)
        if not isinstance(policy, str) or policy not in VALID_POLICIES:
            errors.append(f"{label}: política desconocida {policy!r}")
        elif valid and policy == RoutingPolicy.FIXED_PROBABILITY.value:
            if len(connections) != 2:
                errors.append(f"{label}: la política 'fixed' admite exactamente 2 conexiones")
            elif connections[0]['road'] == connections[1]['road']:
                errors.append(f"{label}: entrada y salida deben estar en vías distintas")

        probability = intersection.get('probability', IntersectionConfig.SWITCH_PROBABILITY)
        if not _is_number(probability) or not 0 <= probability <= 1:
            errors.append(f"{label}: 'probability' debe estar en [0, 1]")

    # Generadores
    for index, generator in enumerate(_entries(data, 'vehicle_generators', errors)):
        label = f"vehicle_generators[{index}]"
        road = generator.get('road')
        if not isinstance(road, str) or not road:
            errors.append(f"{label}: falta 'road'")
        elif road not in road_lengths:
            errors.append(f"{label}: vía desconocida {road!r}")
        frequency = generator.get('frequency')
        if not _is_number(frequency) or frequency <= 0:
            errors.append(f"{label}: 'frequency' debe ser un número positivo")
        _check_vehicle_type(label, generator, errors)

    # Parámetros de simulación
    simulation = data.get('simulation', {})
    if not isinstance(simulation, dict):
        errors.append("'simulation' debe ser un objeto")
    else:
        time_step = simulation.get('time_step', SimulatorConfig.TIME_STEP)
        if not _is_number(time_step) or time_step <= 0:
            errors.append("simulation: 'time_step' debe ser un número positivo")
        max_steps = simulation.get('max_steps')
        if max_steps is not None and (not isinstance(max_steps, int) or
                                      isinstance(max_steps, bool) or max_steps < 0):
            errors.append("simulation: 'max_steps' debe ser un entero no negativo")
        seed = simulation.get('seed')
        if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
            errors.append("simulation: 'seed' debe ser un entero")

    return errors


class TrafficScenario:
    """
    Representa un escenario de simulación validado.

    Se carga desde un archivo JSON o desde un dict ya deserializado; en
    ambos casos el contenido se valida completo antes de aceptarlo.
    """

    def __init__(self, scenario_file: Optional[str] = None, data: Optional[Dict] = None):
        """
        Carga un escenario.

        Args:
            scenario_file: Ruta al archivo JSON con datos del escenario
            data: Contenido del escenario (alternativa al archivo)

        Raises:
            FileNotFoundError: Si el archivo no existe
            ScenarioValidationError: Si el escenario no es válido
        """
        if (scenario_file is None) == (data is None):
            raise ValueError("Indicar exactamente uno de scenario_file o data")

        self.scenario_file = str(scenario_file) if scenario_file is not None else None

        if data is None:
            data = self._read_file()

        errors = validate_scenario(data)
        if errors:
            raise ScenarioValidationError(self.scenario_file, errors)

        self._parse(data)

        logger.info("Escenario cargado: %s (%d vías, %d vehículos)",
                    self.name, len(self.roads), len(self.vehicles))

    def _read_file(self) -> Any:
        """Lee el archivo JSON del escenario."""
        path = Path(self.scenario_file)
        if not path.exists():
            raise FileNotFoundError(f"Escenario no encontrado: {self.scenario_file}")

        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _parse(self, data: Dict):
        """Extrae los datos ya validados."""
        # Metadata del escenario
        self.name = data.get('scenario_name', 'Unknown')
        self.description = data.get('description', '')

        self.roads = data.get('roads', [])
        self.vehicles = data.get('vehicles', [])
        self.traffic_lights = data.get('traffic_lights', [])
        self.bus_stops = data.get('bus_stops', [])
        self.intersections = data.get('intersections', [])
        self.vehicle_generators = data.get('vehicle_generators', [])

        # Parámetros de simulación
        simulation = data.get('simulation', {})
        self.time_step = simulation.get('time_step', SimulatorConfig.TIME_STEP)
        self.max_steps = simulation.get('max_steps')
        self.seed = simulation.get('seed')

    def build_network(self, seed: Optional[int] = None) -> TrafficNetwork:
        """
        Construye la red vial del escenario.

        Args:
            seed: Semilla del generador aleatorio (default: la del escenario)

        Returns:
            TrafficNetwork: Red con vías, vehículos, semáforos, paradas e intersecciones
        """
        network = TrafficNetwork(self.name)
        network.set_random_seed(seed if seed is not None else self.seed)

        for road in self.roads:
            network.add_road(road['name'], road['length'])

        for vehicle in self.vehicles:
            network.add_vehicle(vehicle['road'], vehicle['position'],
                                vehicle.get('type', VehicleType.CAR.value),
                                speed=vehicle.get('speed', 0.0))

        for light in self.traffic_lights:
            network.add_traffic_light(light['road'], light['position'], light['cycle'])

        for stop in self.bus_stops:
            network.add_bus_stop(stop['road'], stop['position'], stop['wait_time'])

        for intersection in self.intersections:
            connections = [RoadConnection(c['road'], c['position'])
                           for c in intersection['connections']]
            network.add_intersection(
                connections,
                policy=RoutingPolicy(intersection.get('policy', RoutingPolicy.FIXED_PROBABILITY.value)),
                switch_probability=intersection.get('probability',
                                                    IntersectionConfig.SWITCH_PROBABILITY)
            )

        return network

    def build_generators(self, network: TrafficNetwork) -> List[VehicleGenerator]:
        """Crea los generadores del escenario sobre la red dada."""
        return [
            VehicleGenerator(network.get_road(g['road']), g['frequency'],
                             g.get('type', VehicleType.CAR.value))
            for g in self.vehicle_generators
        ]

    def build_simulator(self, seed: Optional[int] = None) -> TrafficSimulator:
        """
        Construye un simulador listo para ejecutar.

        Args:
            seed: Semilla (default: la del escenario)

        Returns:
            TrafficSimulator: Simulador con red y generadores
        """
        network = self.build_network(seed)
        return TrafficSimulator(network, self.build_generators(network), time_step=self.time_step)

    def get_summary(self) -> Dict:
        """Retorna un resumen del contenido del escenario."""
        return {
            'name': self.name,
            'roads': len(self.roads),
            'vehicles': len(self.vehicles),
            'traffic_lights': len(self.traffic_lights),
            'bus_stops': len(self.bus_stops),
            'intersections': len(self.intersections),
            'vehicle_generators': len(self.vehicle_generators),
            'max_steps': self.max_steps,
            'seed': self.seed
        }


def load_scenario(scenario_file: str, seed: Optional[int] = None) -> TrafficSimulator:
    """
    Carga un escenario y construye su simulador.

    Args:
        scenario_file: Ruta al archivo JSON
        seed: Semilla (default: la del escenario)

    Returns:
        TrafficSimulator: Simulador listo para ejecutar
    """
    return TrafficScenario(scenario_file).build_simulator(seed)
