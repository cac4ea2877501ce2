"""
Simulador de tráfico vehicular.

Este módulo contiene el motor de simulación que modela:
- Vías con vehículos, semáforos y paradas de bus
- Seguimiento vehicular y respuesta a semáforos
- Cambios de vía en intersecciones
- Generación periódica de vehículos
- Carga de escenarios desde JSON
"""

from .errors import SimulationError, ContractViolation, ScenarioValidationError
from .vehicle import Vehicle, VehicleType, VehicleState
from .traffic_light import TrafficLight, LightState
from .bus_stop import BusStop
from .traffic_network import TrafficNetwork, Road, Intersection, RoadConnection, RoutingPolicy
from .traffic_generator import VehicleGenerator
from .traffic_simulator import TrafficSimulator
from .scenario import TrafficScenario, load_scenario, validate_scenario
from .reporter import StateReporter

__all__ = [
    'SimulationError',
    'ContractViolation',
    'ScenarioValidationError',
    'Vehicle',
    'VehicleType',
    'VehicleState',
    'TrafficLight',
    'LightState',
    'BusStop',
    'TrafficNetwork',
    'Road',
    'Intersection',
    'RoadConnection',
    'RoutingPolicy',
    'VehicleGenerator',
    'TrafficSimulator',
    'TrafficScenario',
    'load_scenario',
    'validate_scenario',
    'StateReporter'
]
