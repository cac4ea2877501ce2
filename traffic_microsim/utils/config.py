"""
Configuración global del simulador de tráfico.

Este módulo contiene todas las constantes y parámetros de configuración
utilizados en el proyecto: rutas de datos, parámetros físicos del modelo
de seguimiento vehicular, semáforos, paradas de bus, intersecciones y
logging.
"""

import logging
from pathlib import Path
from typing import Optional

# Rutas del proyecto
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
SCENARIOS_DIR = DATA_DIR / "scenarios"

# Archivos de escenarios de ejemplo
BASIC_SCENARIO_FILE = SCENARIOS_DIR / "basic_road.json"
INTERSECTION_SCENARIO_FILE = SCENARIOS_DIR / "intersection.json"
BUS_LINE_SCENARIO_FILE = SCENARIOS_DIR / "bus_line.json"


# Parámetros del simulador
class SimulatorConfig:
    """Configuración del bucle de simulación."""

    # Tiempo
    TIME_STEP = 0.0166  # Paso de simulación (~60 Hz)
    DEFAULT_MAX_STEPS = 20000  # Presupuesto de pasos para corridas acotadas

    # Vías
    MIN_ROAD_LENGTH = 100.0  # Longitud efectiva mínima de una vía

    # Reporte
    SPEED_DECIMALS = 1  # Decimales de velocidad en el reporte


# Parámetros físicos de los vehículos
class VehicleConfig:
    """Constantes del modelo de seguimiento vehicular."""

    VEHICLE_LENGTH = 4.0  # l
    MAX_SPEED = 16.6  # vmax
    MAX_ACCELERATION = 1.44  # amax
    MAX_BRAKING = 4.61  # bmax
    MIN_FOLLOWING_DISTANCE = 4.0  # F_MIN

    # Piso para la separación con el líder (evita divisiones por cero)
    MIN_GAP = 0.1

    # Por debajo de esta velocidad el vehículo se considera detenido
    STOPPED_SPEED_THRESHOLD = 0.1


# Parámetros de semáforos
class TrafficLightConfig:
    """Configuración de semáforos."""

    BRAKING_DISTANCE = 15.0  # xs0: distancia de frenado ante rojo
    MIN_SEPARATION = 50.0  # Distancia mínima entre semáforos de una vía


# Parámetros de paradas de bus
class BusStopConfig:
    """Configuración de paradas de bus."""

    PROXIMITY_THRESHOLD = 0.5  # Distancia para considerar al bus en la parada


# Parámetros de intersecciones
class IntersectionConfig:
    """Configuración del enrutamiento en intersecciones."""

    SWITCH_PROBABILITY = 0.3  # Probabilidad de cambio de vía (política fija)
    PROXIMITY_TOLERANCE = 1.0  # Tolerancia para detectar la entrada


# Parámetros de generadores
class VehicleGeneratorConfig:
    """Configuración de los generadores de vehículos."""

    # La zona de aparición mide SPAWN_ZONE_FACTOR * VEHICLE_LENGTH
    SPAWN_ZONE_FACTOR = 2


# Logging
class LoggingConfig:
    """Configuración de logging."""

    LOG_LEVEL = "INFO"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE = PROJECT_ROOT / "simulation.log"


def setup_logging(level: Optional[str] = None, log_file: Optional[Path] = None):
    """
    Configura el logging del paquete según LoggingConfig.

    Args:
        level: Nivel de logging (default: LoggingConfig.LOG_LEVEL)
        log_file: Archivo adicional de salida (opcional)
    """
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level or LoggingConfig.LOG_LEVEL,
        format=LoggingConfig.LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


if __name__ == "__main__":
    print(f"Directorio del proyecto: {PROJECT_ROOT}")
    print(f"Directorio de escenarios: {SCENARIOS_DIR}")
    print(f"Paso de simulación: {SimulatorConfig.TIME_STEP}s")
