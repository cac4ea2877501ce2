"""
Errores del simulador.

Dos familias: violaciones de contrato (argumentos inválidos en una
operación concreta) y fallos de validación de escenario (el archivo se
rechaza completo antes de simular).
"""

from typing import List, Optional


class SimulationError(Exception):
    """Error base del simulador."""


class ContractViolation(SimulationError, ValueError):
    """
    Violación de una precondición o postcondición.

    Attributes:
        component: Componente que detectó la violación (ej: "Vehicle")
        condition: Descripción de la condición incumplida
    """

    def __init__(self, component: str, condition: str):
        self.component = component
        self.condition = condition
        super().__init__(f"[{component}] {condition}")


class ScenarioValidationError(SimulationError, ValueError):
    """
    El escenario no es válido y no se carga ninguna entidad.

    Attributes:
        source: Archivo o identificador del escenario
        errors: Lista de problemas encontrados
    """

    def __init__(self, source: Optional[str], errors: List[str]):
        self.source = source
        self.errors = list(errors)
        header = f"Escenario inválido: {source}" if source else "Escenario inválido"
        details = "\n".join(f"  - {error}" for error in self.errors)
        super().__init__(f"{header}\n{details}")
