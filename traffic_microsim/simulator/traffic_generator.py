"""
Generador periódico de vehículos.

Cada generador alimenta una vía: cuando transcurre su intervalo y la zona
de entrada está libre, crea un vehículo en la posición 0.
"""

import logging
from typing import Dict, Optional, Union

from .errors import ContractViolation
from .traffic_network import Road
from .vehicle import Vehicle, VehicleType
from ..utils.config import VehicleConfig, VehicleGeneratorConfig

logger = logging.getLogger(__name__)


class VehicleGenerator:
    """
    Genera vehículos a intervalos regulares en el inicio de una vía.

    Si la zona de entrada [0, 2·l) está ocupada, la generación se pospone
    sin reiniciar el intervalo: se vuelve a intentar en cada paso.
    """

    def __init__(self, road: Road, frequency: float,
                 vehicle_type: Union[str, VehicleType] = VehicleType.CAR):
        """
        Inicializa el generador.

        Args:
            road: Vía donde aparecen los vehículos
            frequency: Intervalo entre generaciones (segundos)
            vehicle_type: Clase de los vehículos generados

        Raises:
            ContractViolation: Si la vía falta o el intervalo no es positivo
        """
        if road is None:
            raise ContractViolation("VehicleGenerator", "El generador necesita una vía")
        if frequency <= 0:
            raise ContractViolation(
                "VehicleGenerator", f"El intervalo debe ser positivo: {frequency}"
            )

        self.road = road
        self.frequency = float(frequency)
        self.vehicle_type = VehicleType.from_tag(vehicle_type)

        self.last_generated = 0.0
        self.total_vehicles_generated = 0
        self.total_blocked_attempts = 0

    @property
    def spawn_zone_length(self) -> float:
        return VehicleGeneratorConfig.SPAWN_ZONE_FACTOR * VehicleConfig.VEHICLE_LENGTH

    def is_spawn_zone_clear(self) -> bool:
        """Verifica que ningún vehículo ocupe la zona de entrada."""
        return self.road.is_zone_clear(0.0, self.spawn_zone_length)

    def update(self, current_time: float) -> Optional[Vehicle]:
        """
        Genera un vehículo si corresponde.

        Args:
            current_time: Tiempo actual de simulación

        Returns:
            Vehicle: El vehículo generado, o None
        """
        if current_time - self.last_generated < self.frequency:
            return None

        if not self.is_spawn_zone_clear():
            self.total_blocked_attempts += 1
            return None

        vehicle = Vehicle(self.road.name, 0.0, self.vehicle_type, spawn_time=current_time)
        self.road.add_vehicle(vehicle)
        self.last_generated = current_time
        self.total_vehicles_generated += 1

        logger.debug("Generado vehículo #%d (%s) en %s (t=%.3f)",
                     vehicle.id, self.vehicle_type.value, self.road.name, current_time)
        return vehicle

    def get_spawn_statistics(self, current_time: float = 0.0) -> Dict:
        """
        Retorna estadísticas de generación.

        Args:
            current_time: Tiempo transcurrido, para la tasa efectiva

        Returns:
            dict: Estadísticas de spawn
        """
        if current_time > 0:
            actual_rate = (self.total_vehicles_generated / current_time) * 3600
        else:
            actual_rate = 0

        return {
            'road': self.road.name,
            'vehicle_type': self.vehicle_type.value,
            'total_generated': self.total_vehicles_generated,
            'blocked_attempts': self.total_blocked_attempts,
            'target_rate_per_hour': 3600 / self.frequency,
            'actual_rate_per_hour': actual_rate
        }

    def reset(self):
        """Reinicia el generador."""
        self.last_generated = 0.0
        self.total_vehicles_generated = 0
        self.total_blocked_attempts = 0

    def __repr__(self) -> str:
        return (f"VehicleGenerator(road='{self.road.name}', frequency={self.frequency}, "
                f"type={self.vehicle_type.value})")
