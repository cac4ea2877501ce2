"""
Modelo de semáforo cíclico de dos estados.

Cada semáforo está asociado a una posición de una vía y alterna entre
verde y rojo cada vez que transcurre su ciclo.
"""

from enum import Enum
import logging

from .errors import ContractViolation

logger = logging.getLogger(__name__)


class LightState(Enum):
    """Estados posibles de un semáforo."""
    GREEN = "green"
    RED = "red"


class TrafficLight:
    """
    Representa un semáforo sobre una vía.

    El semáforo empieza en verde y cambia de estado cuando el tiempo
    transcurrido desde el último cambio alcanza la duración del ciclo.
    """

    def __init__(self, road_name: str, position: float, cycle: float):
        """
        Inicializa un semáforo.

        Args:
            road_name: Nombre de la vía donde está ubicado
            position: Posición sobre la vía
            cycle: Duración de cada estado (segundos)

        Raises:
            ContractViolation: Si algún argumento no es válido
        """
        if not road_name:
            raise ContractViolation("TrafficLight", "El semáforo necesita una vía")
        if position < 0:
            raise ContractViolation("TrafficLight", f"Posición negativa: {position}")
        if cycle <= 0:
            raise ContractViolation("TrafficLight", f"El ciclo debe ser positivo: {cycle}")

        self.road_name = road_name
        self.position = float(position)
        self.cycle = float(cycle)

        # Estado
        self.state = LightState.GREEN
        self.last_switch_time = 0.0

        # Estadísticas
        self.total_switches = 0

    def update(self, current_time: float):
        """
        Actualiza el estado del semáforo.

        Args:
            current_time: Tiempo actual de simulación

        Raises:
            ContractViolation: Si el tiempo es negativo o retrocede
        """
        if current_time < 0:
            raise ContractViolation("TrafficLight", f"Tiempo negativo: {current_time}")
        if current_time < self.last_switch_time:
            raise ContractViolation(
                "TrafficLight",
                f"El tiempo retrocedió: {current_time} < {self.last_switch_time}"
            )

        if current_time - self.last_switch_time >= self.cycle:
            self.state = LightState.RED if self.is_green() else LightState.GREEN
            self.last_switch_time = current_time
            self.total_switches += 1
            logger.debug("Semáforo %s@%.0f cambia a %s (t=%.3f)",
                         self.road_name, self.position, self.state.value, current_time)

    def is_green(self) -> bool:
        """Retorna True si el semáforo está en verde."""
        return self.state == LightState.GREEN

    def get_status(self) -> str:
        """Retorna el estado como texto ("green" o "red")."""
        return self.state.value

    def get_time_until_switch(self, current_time: float) -> float:
        """
        Calcula cuánto falta para el próximo cambio de estado.

        Args:
            current_time: Tiempo actual de simulación

        Returns:
            float: Tiempo restante (0 si el cambio ya corresponde)
        """
        return max(0.0, self.cycle - (current_time - self.last_switch_time))

    def reset(self):
        """Reinicia el semáforo a verde en t=0."""
        self.state = LightState.GREEN
        self.last_switch_time = 0.0
        self.total_switches = 0

    def __str__(self) -> str:
        return f"TrafficLight({self.road_name}@{self.position:.0f}, {self.state.value})"

    def __repr__(self) -> str:
        return (f"TrafficLight(road='{self.road_name}', position={self.position}, "
                f"cycle={self.cycle}, state={self.state.value})")
