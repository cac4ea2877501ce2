"""
Modelo de vehículo con dinámica de seguimiento vehicular.

Este módulo implementa el comportamiento de un vehículo individual:
cálculo de aceleración respecto al vehículo líder, respuesta a semáforos
en rojo, integración cinemática y espera en paradas de bus.
"""

from typing import Dict, Iterable, Optional, Union
from enum import Enum
import itertools
import math

from .errors import ContractViolation
from ..utils.config import (
    BusStopConfig,
    SimulatorConfig,
    TrafficLightConfig,
    VehicleConfig,
)


class VehicleType(Enum):
    """Clases de vehículo admitidas."""
    CAR = "car"
    BUS = "bus"
    POLICE_CAR = "police-car"
    AMBULANCE = "ambulance"
    FIRE_TRUCK = "fire-truck"

    @classmethod
    def from_tag(cls, tag: Union[str, "VehicleType"]) -> "VehicleType":
        """
        Convierte una etiqueta de texto en VehicleType.

        Raises:
            ContractViolation: Si la etiqueta no pertenece al conjunto cerrado
        """
        if isinstance(tag, cls):
            return tag
        try:
            return cls(tag)
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ContractViolation(
                "Vehicle", f"Tipo de vehículo desconocido: {tag!r} (válidos: {valid})"
            ) from None


# Constantes físicas por clase de vehículo
VEHICLE_PARAMETERS: Dict[VehicleType, Dict[str, float]] = {
    vehicle_type: {
        'length': VehicleConfig.VEHICLE_LENGTH,
        'max_speed': VehicleConfig.MAX_SPEED,
        'max_acceleration': VehicleConfig.MAX_ACCELERATION,
        'max_braking': VehicleConfig.MAX_BRAKING,
        'min_following_distance': VehicleConfig.MIN_FOLLOWING_DISTANCE,
    }
    for vehicle_type in VehicleType
}


class VehicleState(Enum):
    """Estados posibles de un vehículo."""
    MOVING = "moving"              # Moviéndose normalmente
    BRAKING = "braking"            # Frenando
    STOPPED = "stopped"            # Detenido (cola o semáforo)
    WAITING_AT_STOP = "waiting"    # Esperando en parada de bus
    EXITED = "exited"              # Salió de la red


class Vehicle:
    """
    Representa un vehículo individual en la simulación.

    El vehículo conoce su vía sólo por nombre; la vía (Road) es quien
    posee la colección de vehículos. El estado de espera en paradas es
    propio de cada instancia.
    """

    # Contador global para IDs únicos
    _id_counter = itertools.count(1)

    def __init__(self, road_name: str, position: float = 0.0,
                 vehicle_type: Union[str, VehicleType] = VehicleType.CAR,
                 speed: float = 0.0, spawn_time: float = 0.0):
        """
        Inicializa un vehículo.

        Args:
            road_name: Nombre de la vía donde se encuentra
            position: Posición inicial sobre la vía
            vehicle_type: Clase de vehículo (VehicleType o su etiqueta)
            speed: Velocidad inicial (default: detenido)
            spawn_time: Tiempo de simulación en que apareció

        Raises:
            ContractViolation: Si algún argumento no es válido
        """
        if not road_name:
            raise ContractViolation("Vehicle", "El vehículo necesita una vía")
        if position < 0:
            raise ContractViolation("Vehicle", f"Posición negativa: {position}")

        self.vehicle_type = VehicleType.from_tag(vehicle_type)
        params = VEHICLE_PARAMETERS[self.vehicle_type]

        if not 0 <= speed <= params['max_speed']:
            raise ContractViolation(
                "Vehicle", f"Velocidad fuera de rango [0, {params['max_speed']}]: {speed}"
            )

        # Identificación
        self.id = next(Vehicle._id_counter)

        # Ubicación
        self.road_name = road_name
        self.position = float(position)

        # Física del vehículo
        self.length = params['length']
        self.max_speed = params['max_speed']
        self.max_acceleration = params['max_acceleration']
        self.max_braking = params['max_braking']
        self.min_following_distance = params['min_following_distance']
        self.speed = float(speed)
        self.acceleration = 0.0

        # Espera en paradas: posición de la parada -> tiempo acumulado
        self.dwell_timers: Dict[float, float] = {}
        self.is_waiting = False

        # Estado
        self.state = VehicleState.MOVING
        self.spawn_time = spawn_time
        self.exit_time: Optional[float] = None
        self.last_update_tick: Optional[int] = None
        self.last_handoff = None  # (intersección, conexión) del último traspaso

        # Estadísticas
        self.distance_traveled = 0.0
        self.total_waiting_time = 0.0
        self.dwell_time = 0.0
        self.num_stops = 0
        self.num_switches = 0
        self._was_stopped = self.speed < VehicleConfig.STOPPED_SPEED_THRESHOLD

    @property
    def is_bus(self) -> bool:
        return self.vehicle_type == VehicleType.BUS

    def compute_acceleration(self, leader: Optional["Vehicle"]) -> float:
        """
        Calcula la aceleración según el modelo de seguimiento vehicular.

        Con líder:
            gap = x_líder - x - l
            Δv = v - v_líder
            s* = F_MIN + max(0, (v + Δv) / (2·sqrt(amax·bmax))) · gap
            a = amax · (1 - (v/vmax)^4 - (s*/gap)^2)

        Sin líder:
            a = amax · (1 - (v/vmax)^4)

        Args:
            leader: Vehículo inmediatamente adelante en la misma vía (o None)

        Returns:
            float: Nueva aceleración
        """
        free_term = 1 - (self.speed / self.max_speed) ** 4

        if leader is None:
            self.acceleration = self.max_acceleration * free_term
            return self.acceleration

        gap = max(leader.position - self.position - self.length, VehicleConfig.MIN_GAP)
        relative_speed = self.speed - leader.speed

        interaction = (self.speed + relative_speed) / (
            2 * math.sqrt(self.max_acceleration * self.max_braking)
        )
        safe_gap = self.min_following_distance + max(0.0, interaction) * gap

        self.acceleration = self.max_acceleration * (free_term - (safe_gap / gap) ** 2)
        return self.acceleration

    def apply_traffic_light_rules(self, traffic_lights: Iterable) -> float:
        """
        Sobrescribe la aceleración si hay un semáforo en rojo cerca.

        Cada semáforo en rojo ubicado adelante a menos de xs0 propone
        min(-bmax, -(d/xs0)^2 · amax). Se aplica la frenada más fuerte.

        Args:
            traffic_lights: Semáforos de la vía actual

        Returns:
            float: Aceleración resultante
        """
        xs0 = TrafficLightConfig.BRAKING_DISTANCE
        overrides = []

        for light in traffic_lights:
            if light.is_green():
                continue
            distance = light.position - self.position
            if 0 < distance < xs0:
                overrides.append(
                    min(-self.max_braking, -((distance / xs0) ** 2) * self.max_acceleration)
                )

        if overrides:
            self.acceleration = min(overrides)
            self.state = VehicleState.BRAKING

        return self.acceleration

    def integrate(self, dt: float):
        """
        Integra velocidad y posición durante un paso dt.

        Si la velocidad pasaría a ser negativa, el vehículo se detiene y
        avanza sólo la distancia de frenado v²/(2|a|).

        Args:
            dt: Paso de tiempo

        Raises:
            ContractViolation: Si dt no es positivo o se rompe 0 <= v <= vmax
        """
        if dt <= 0:
            raise ContractViolation("Vehicle", f"El paso de tiempo debe ser positivo: {dt}")

        old_position = self.position

        if self.speed + self.acceleration * dt < 0:
            self.position -= (self.speed ** 2) / (2 * self.acceleration)
            self.speed = 0.0
        else:
            self.speed = min(self.speed + self.acceleration * dt, self.max_speed)
            displacement = self.speed * dt + 0.5 * self.acceleration * dt ** 2
            self.position += max(0.0, displacement)

        if not 0 <= self.speed <= self.max_speed:
            raise ContractViolation(
                "Vehicle", f"Velocidad fuera de rango tras integrar: {self.speed}"
            )

        self.distance_traveled += self.position - old_position

        if self.speed < VehicleConfig.STOPPED_SPEED_THRESHOLD:
            self.state = VehicleState.STOPPED
        elif self.acceleration < 0:
            self.state = VehicleState.BRAKING
        else:
            self.state = VehicleState.MOVING

    def evaluate_dwell(self, stop_position: float, dwell_duration: float,
                       dt: float = SimulatorConfig.TIME_STEP) -> bool:
        """
        Evalúa si el vehículo debe esperar en una parada de bus.

        Sólo los buses esperan. Dentro del umbral de proximidad se acumula
        un paso de espera; mientras el acumulado sea menor que la duración
        el bus queda detenido.

        Args:
            stop_position: Posición de la parada
            dwell_duration: Duración de la espera
            dt: Incremento de espera por paso

        Returns:
            bool: True si el bus debe seguir esperando este paso
        """
        if dwell_duration < 0:
            raise ContractViolation(
                "Vehicle", f"Duración de espera negativa: {dwell_duration}"
            )

        if not self.is_bus:
            return False

        if abs(self.position - stop_position) < BusStopConfig.PROXIMITY_THRESHOLD:
            elapsed = self.dwell_timers.get(stop_position, 0.0) + dt
            self.dwell_timers[stop_position] = elapsed
            if elapsed < dwell_duration:
                self.speed = 0.0
                self.state = VehicleState.WAITING_AT_STOP
                return True
        else:
            self.dwell_timers[stop_position] = 0.0

        return False

    def relocate(self, road_name: str, position: float):
        """
        Traslada el vehículo a otra vía (cambio en intersección).

        Args:
            road_name: Nombre de la vía destino
            position: Posición en la vía destino
        """
        if not road_name:
            raise ContractViolation("Vehicle", "La vía destino no puede ser vacía")
        if position < 0:
            raise ContractViolation("Vehicle", f"Posición negativa: {position}")

        self.road_name = road_name
        self.position = float(position)
        self.dwell_timers.clear()
        self.num_switches += 1

    def update_statistics(self, dt: float):
        """
        Actualiza estadísticas del vehículo.

        Args:
            dt: Paso de tiempo
        """
        is_stopped = self.speed < VehicleConfig.STOPPED_SPEED_THRESHOLD

        if self.is_waiting:
            self.dwell_time += dt

        if is_stopped:
            self.total_waiting_time += dt

            # Contar nueva parada
            if not self._was_stopped:
                self.num_stops += 1
                self._was_stopped = True
        else:
            self._was_stopped = False

    def mark_exited(self, current_time: float):
        """Marca al vehículo como salido de la red."""
        self.state = VehicleState.EXITED
        self.exit_time = current_time

    def has_exited(self) -> bool:
        """Verifica si el vehículo salió de la red."""
        return self.state == VehicleState.EXITED

    def get_travel_time(self, current_time: float) -> float:
        """
        Calcula el tiempo total de viaje.

        Args:
            current_time: Tiempo actual de simulación

        Returns:
            float: Tiempo de viaje
        """
        if self.has_exited() and self.exit_time is not None:
            return self.exit_time - self.spawn_time
        return current_time - self.spawn_time

    def get_average_speed(self) -> float:
        """
        Calcula la velocidad promedio del viaje completado.

        Returns:
            float: Velocidad promedio (0 si no salió o no se movió)
        """
        if self.distance_traveled == 0 or self.exit_time is None:
            return 0.0

        travel_time = self.exit_time - self.spawn_time
        if travel_time <= 0:
            return 0.0

        return self.distance_traveled / travel_time

    def get_statistics(self) -> dict:
        """
        Retorna un diccionario con todas las estadísticas del vehículo.

        Returns:
            dict: Estadísticas completas
        """
        return {
            'vehicle_id': self.id,
            'type': self.vehicle_type.value,
            'road': self.road_name,
            'spawn_time': self.spawn_time,
            'exit_time': self.exit_time,
            'travel_time': self.get_travel_time(self.exit_time or self.spawn_time),
            'distance_traveled': self.distance_traveled,
            'avg_speed': self.get_average_speed(),
            'total_waiting_time': self.total_waiting_time,
            'dwell_time': self.dwell_time,
            'num_stops': self.num_stops,
            'num_switches': self.num_switches,
            'exited': self.has_exited()
        }

    def get_status_string(self) -> str:
        """
        Retorna una representación legible del estado actual.

        Returns:
            str: String con estado formateado
        """
        if self.has_exited():
            return f"Vehículo #{self.id} ({self.vehicle_type.value}) - SALIÓ DE LA RED"

        status = f"Vehículo #{self.id} ({self.vehicle_type.value}) | "
        status += f"Estado: {self.state.value.upper()} | "
        status += f"Vía: {self.road_name} | "
        status += f"Posición: {self.position:.1f} | "
        status += f"Velocidad: {self.speed:.1f} | "
        status += f"Paradas: {self.num_stops}"

        return status

    def __str__(self) -> str:
        return f"Vehicle(#{self.id}, {self.vehicle_type.value} en {self.road_name})"

    def __repr__(self) -> str:
        return (f"Vehicle(id={self.id}, type={self.vehicle_type.value}, "
                f"road='{self.road_name}', position={self.position:.2f}, "
                f"speed={self.speed:.2f})")
