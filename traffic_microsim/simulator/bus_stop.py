"""
Parada de bus: vía, posición y tiempo de espera.
"""

from dataclasses import dataclass

from .errors import ContractViolation


@dataclass(frozen=True)
class BusStop:
    """
    Parada de bus ubicada sobre una vía.

    Inmutable una vez creada. Los buses que pasan a menos de
    BusStopConfig.PROXIMITY_THRESHOLD se detienen durante wait_time.
    """

    road_name: str
    position: float
    wait_time: float

    def __post_init__(self):
        if not self.road_name:
            raise ContractViolation("BusStop", "La parada necesita una vía")
        if self.position < 0:
            raise ContractViolation("BusStop", f"Posición negativa: {self.position}")
        if self.wait_time < 0:
            raise ContractViolation("BusStop", f"Tiempo de espera negativo: {self.wait_time}")

    def __str__(self) -> str:
        return f"BusStop({self.road_name}@{self.position:.0f}, {self.wait_time}s)"
