"""
Modelo de red vial: vías, intersecciones y la red que las contiene.

La red (TrafficNetwork) es dueña de las vías, indexadas por nombre. Cada
vía (Road) es dueña de los vehículos que circulan por ella; un vehículo
sólo guarda el nombre de su vía actual. Las intersecciones transfieren
vehículos entre vías y la conectividad resultante se modela como un grafo
dirigido donde los nodos son vías y las aristas son traspasos posibles.
"""

import logging
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Sequence, Set, Tuple, Union

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np

from .bus_stop import BusStop
from .errors import ContractViolation
from .traffic_light import TrafficLight
from .vehicle import Vehicle, VehicleType
from ..utils.config import IntersectionConfig, SimulatorConfig

logger = logging.getLogger(__name__)


class RoutingPolicy(Enum):
    """Políticas de enrutamiento en intersecciones."""
    FIXED_PROBABILITY = "fixed"    # Un par entrada/salida, probabilidad fija
    UNIFORM_CHOICE = "uniform"     # Elección uniforme entre salidas alternativas


class RoadConnection(NamedTuple):
    """Punto de una vía vinculado a una intersección."""
    road_name: str
    position: float


class Intersection:
    """
    Representa una intersección entre vías.

    Con la política FIXED_PROBABILITY la primera conexión es la entrada y
    la segunda la salida: un vehículo cerca de la entrada cambia de vía con
    probabilidad fija. Con UNIFORM_CHOICE cualquier conexión es una entrada
    y el destino se sortea entre seguir en la vía actual o cualquiera de
    las conexiones sobre otras vías.
    """

    def __init__(self, connections: Sequence[RoadConnection], network: "TrafficNetwork",
                 policy: RoutingPolicy = RoutingPolicy.FIXED_PROBABILITY,
                 switch_probability: float = IntersectionConfig.SWITCH_PROBABILITY,
                 rng: Optional[np.random.Generator] = None):
        """
        Inicializa una intersección.

        Args:
            connections: Conexiones (vía, posición), al menos 2
            network: Red que contiene las vías referenciadas
            policy: Política de enrutamiento
            switch_probability: Probabilidad de cambio (política fija)
            rng: Generador aleatorio propio (default: el de la red)

        Raises:
            ContractViolation: Si las conexiones no son válidas
        """
        connections = [RoadConnection(*c) for c in connections]

        if len(connections) < 2:
            raise ContractViolation(
                "Intersection", f"Se necesitan al menos 2 conexiones, hay {len(connections)}"
            )
        for connection in connections:
            if not network.has_road(connection.road_name):
                raise ContractViolation(
                    "Intersection", f"Vía inexistente: {connection.road_name!r}"
                )
            road = network.get_road(connection.road_name)
            if not 0 <= connection.position <= road.length:
                raise ContractViolation(
                    "Intersection",
                    f"Posición {connection.position} fuera de la vía "
                    f"{road.name!r} (longitud {road.length})"
                )
        if policy == RoutingPolicy.FIXED_PROBABILITY:
            if len(connections) != 2:
                raise ContractViolation(
                    "Intersection",
                    "La política de probabilidad fija admite exactamente un par entrada/salida"
                )
            if connections[0].road_name == connections[1].road_name:
                raise ContractViolation(
                    "Intersection", "La entrada y la salida deben estar en vías distintas"
                )
        if not 0 <= switch_probability <= 1:
            raise ContractViolation(
                "Intersection", f"Probabilidad fuera de [0, 1]: {switch_probability}"
            )

        self.connections = connections
        self.network = network
        self.policy = policy
        self.switch_probability = switch_probability
        self._rng = rng

        # Estadísticas
        self.total_switches = 0

    @property
    def rng(self) -> np.random.Generator:
        """Generador aleatorio en uso (propio o compartido por la red)."""
        return self._rng if self._rng is not None else self.network.rng

    @property
    def entries(self) -> List[RoadConnection]:
        """Conexiones que funcionan como entrada."""
        if self.policy == RoutingPolicy.FIXED_PROBABILITY:
            return self.connections[:1]
        return list(self.connections)

    @property
    def road_names(self) -> Set[str]:
        return {c.road_name for c in self.connections}

    def _find_entry(self, vehicle: Vehicle) -> Optional[RoadConnection]:
        for entry in self.entries:
            if (vehicle.road_name == entry.road_name and
                    abs(vehicle.position - entry.position) <= IntersectionConfig.PROXIMITY_TOLERANCE):
                return entry
        return None

    def is_near(self, vehicle: Vehicle) -> bool:
        """
        Verifica si el vehículo está sobre alguna entrada de la intersección.

        Args:
            vehicle: Vehículo a evaluar

        Returns:
            bool: True si está dentro de la tolerancia de una entrada
        """
        return self._find_entry(vehicle) is not None

    def attempt_switch(self, vehicle: Vehicle) -> bool:
        """
        Intenta transferir el vehículo a otra vía.

        Args:
            vehicle: Vehículo ofrecido a la intersección

        Returns:
            bool: True si el vehículo cambió de vía
        """
        entry = self._find_entry(vehicle)
        if entry is None:
            return False

        if self.policy == RoutingPolicy.FIXED_PROBABILITY:
            if self.rng.random() >= self.switch_probability:
                return False
            target = self.connections[1]
        else:
            # No devolver un vehículo desde la conexión donde fue entregado
            if vehicle.last_handoff == (self, entry):
                return False
            options: List[Optional[RoadConnection]] = [None]
            options.extend(c for c in self.connections if c.road_name != entry.road_name)
            target = options[int(self.rng.integers(len(options)))]
            if target is None:
                return False

        self._switch(vehicle, target)
        return True

    def _switch(self, vehicle: Vehicle, target: RoadConnection):
        """Mueve el vehículo de su vía actual a la conexión destino."""
        source_road = self.network.get_road(vehicle.road_name)
        target_road = self.network.get_road(target.road_name)

        source_road.remove_vehicle(vehicle)
        vehicle.relocate(target_road.name, target.position)
        target_road.add_vehicle(vehicle)
        vehicle.last_handoff = (self, target)
        self.total_switches += 1

        logger.debug("Vehículo #%d: %s -> %s@%.1f",
                     vehicle.id, source_road.name, target_road.name, target.position)

    def __str__(self) -> str:
        links = ", ".join(f"{c.road_name}@{c.position:g}" for c in self.connections)
        return f"Intersection({links}; {self.policy.value})"

    def __repr__(self) -> str:
        return (f"Intersection(connections={self.connections}, "
                f"policy={self.policy.value}, p={self.switch_probability})")


class Road:
    """
    Representa una vía con nombre y longitud.

    La vía es dueña de los vehículos que circulan por ella y conoce los
    semáforos, paradas e intersecciones asociados. Su actualización
    aplica, por vehículo: seguimiento, semáforos, paradas, integración,
    intersecciones y salida por el final de la vía.
    """

    def __init__(self, name: str, length: float):
        """
        Inicializa una vía.

        Args:
            name: Nombre único de la vía
            length: Longitud (la efectiva nunca es menor a MIN_ROAD_LENGTH)

        Raises:
            ContractViolation: Si el nombre es vacío o la longitud no es positiva
        """
        if not name:
            raise ContractViolation("Road", "El nombre de la vía no puede ser vacío")
        if length <= 0:
            raise ContractViolation("Road", f"La longitud debe ser positiva: {length}")

        self.name = name
        self.raw_length = float(length)
        self.length = max(float(length), SimulatorConfig.MIN_ROAD_LENGTH)

        # Vehículos actualmente en esta vía (por ID, en orden de llegada)
        self.vehicles: Dict[int, Vehicle] = {}

        self.traffic_lights: List[TrafficLight] = []
        self.bus_stops: List[BusStop] = []
        self.intersections: List[Intersection] = []

        # Estadísticas
        self.total_exited = 0

    def add_vehicle(self, vehicle: Vehicle):
        """
        Agrega un vehículo a la vía.

        Raises:
            ContractViolation: Si el vehículo referencia otra vía o está fuera de rango
        """
        if vehicle.road_name != self.name:
            raise ContractViolation(
                "Road", f"El vehículo #{vehicle.id} referencia la vía {vehicle.road_name!r}"
            )
        if not 0 <= vehicle.position <= self.length:
            raise ContractViolation(
                "Road",
                f"Posición {vehicle.position} fuera de la vía {self.name!r} (longitud {self.length})"
            )
        self.vehicles[vehicle.id] = vehicle

    def remove_vehicle(self, vehicle: Vehicle):
        """Remueve un vehículo de la vía (si está)."""
        self.vehicles.pop(vehicle.id, None)

    def get_vehicles(self) -> List[Vehicle]:
        """Retorna los vehículos de la vía en orden de llegada."""
        return list(self.vehicles.values())

    def add_traffic_light(self, light: TrafficLight):
        """Asocia un semáforo a la vía."""
        self._check_binding("TrafficLight", light.road_name, light.position)
        self.traffic_lights.append(light)

    def add_bus_stop(self, stop: BusStop):
        """Asocia una parada de bus a la vía."""
        self._check_binding("BusStop", stop.road_name, stop.position)
        self.bus_stops.append(stop)

    def add_intersection(self, intersection: Intersection):
        """Asocia una intersección a la vía."""
        if self.name not in intersection.road_names:
            raise ContractViolation("Road", f"La intersección no conecta la vía {self.name!r}")
        if intersection not in self.intersections:
            self.intersections.append(intersection)

    def _check_binding(self, component: str, road_name: str, position: float):
        if road_name != self.name:
            raise ContractViolation(component, f"Referencia la vía {road_name!r}, no {self.name!r}")
        if position > self.length:
            raise ContractViolation(
                component, f"Posición {position} fuera de la vía {self.name!r} (longitud {self.length})"
            )

    def find_leading_vehicle(self, vehicle: Vehicle) -> Optional[Vehicle]:
        """
        Busca el vehículo inmediatamente adelante.

        Args:
            vehicle: Vehículo de referencia

        Returns:
            Vehicle con la menor distancia estrictamente positiva, o None.
            En caso de empate gana el que llegó primero a la vía.
        """
        leader = None
        best_gap = float('inf')

        for other in self.vehicles.values():
            if other is vehicle:
                continue
            gap = other.position - vehicle.position
            if 0 < gap < best_gap:
                leader = other
                best_gap = gap

        return leader

    def is_zone_clear(self, start: float, end: float) -> bool:
        """Verifica que no haya vehículos en [start, end)."""
        return not any(start <= v.position < end for v in self.vehicles.values())

    def update(self, dt: float = SimulatorConfig.TIME_STEP, tick: Optional[int] = None,
               current_time: float = 0.0) -> List[Vehicle]:
        """
        Ejecuta un paso de actualización para todos los vehículos de la vía.

        Se recorre una copia de la colección, de modo que las altas y bajas
        durante el recorrido no saltean ni repiten vehículos.

        Args:
            dt: Paso de tiempo
            tick: Índice del paso; un vehículo ya actualizado en este paso
                  (por venir de otra vía) no se vuelve a actualizar
            current_time: Tiempo de simulación, para registrar salidas

        Returns:
            List[Vehicle]: Vehículos que salieron por el final de la vía
        """
        exited = []

        for vehicle in list(self.vehicles.values()):
            if tick is not None:
                if vehicle.last_update_tick == tick:
                    continue
                vehicle.last_update_tick = tick

            # 1. Seguimiento vehicular
            vehicle.compute_acceleration(self.find_leading_vehicle(vehicle))

            # 2. Semáforos
            vehicle.apply_traffic_light_rules(self.traffic_lights)

            # 3. Paradas de bus (se evalúan todas para reiniciar contadores)
            waiting = False
            for stop in self.bus_stops:
                if vehicle.evaluate_dwell(stop.position, stop.wait_time, dt):
                    waiting = True
            vehicle.is_waiting = waiting
            if not waiting:
                vehicle.integrate(dt)
            vehicle.update_statistics(dt)

            # 4. Intersecciones
            for intersection in list(self.intersections):
                intersection.attempt_switch(vehicle)

            # 5. Salida por el final de la vía
            if vehicle.road_name == self.name and vehicle.position >= self.length:
                self.remove_vehicle(vehicle)
                vehicle.mark_exited(current_time)
                self.total_exited += 1
                exited.append(vehicle)
                logger.debug("Vehículo #%d salió por el final de %s", vehicle.id, self.name)

        return exited

    def is_empty(self) -> bool:
        return not self.vehicles

    def __str__(self) -> str:
        return f"Road({self.name}, {self.length:g})"

    def __repr__(self) -> str:
        return (f"Road(name='{self.name}', length={self.length}, "
                f"vehicles={len(self.vehicles)}, lights={len(self.traffic_lights)})")


class TrafficNetwork:
    """
    Representa la red vial completa.

    Es la dueña de las vías (indexadas por nombre) y de las intersecciones,
    y mantiene un grafo dirigido G = (V, E) donde V son las vías y E los
    traspasos posibles entre ellas. También guarda el generador aleatorio
    compartido por las intersecciones.
    """

    def __init__(self, network_name: str = "", rng: Optional[np.random.Generator] = None):
        """
        Inicializa una red vacía.

        Args:
            network_name: Nombre descriptivo de la red
            rng: Generador aleatorio compartido (default: uno sin semilla)
        """
        self.graph = nx.DiGraph()
        self.roads: Dict[str, Road] = {}
        self.intersections: List[Intersection] = []
        self.network_name = network_name
        self.rng = rng if rng is not None else np.random.default_rng()

    def set_random_seed(self, seed: Optional[int]):
        """
        Reemplaza el generador compartido por uno con semilla.

        Args:
            seed: Semilla para reproducibilidad
        """
        self.rng = np.random.default_rng(seed)

    def add_road(self, name: str, length: float) -> Road:
        """
        Agrega una vía a la red.

        Raises:
            ContractViolation: Si ya existe una vía con ese nombre
        """
        if name in self.roads:
            raise ContractViolation("TrafficNetwork", f"Vía duplicada: {name!r}")

        road = Road(name, length)
        self.roads[name] = road
        self.graph.add_node(name, length=road.length, road=road)
        return road

    def has_road(self, name: str) -> bool:
        return name in self.roads

    def get_road(self, name: str) -> Road:
        """
        Retorna la vía con el nombre dado.

        Raises:
            ContractViolation: Si la vía no existe
        """
        road = self.roads.get(name)
        if road is None:
            raise ContractViolation("TrafficNetwork", f"Vía inexistente: {name!r}")
        return road

    def add_vehicle(self, road_name: str, position: float = 0.0,
                    vehicle_type: Union[str, VehicleType] = VehicleType.CAR,
                    speed: float = 0.0, spawn_time: float = 0.0) -> Vehicle:
        """Crea un vehículo y lo agrega a la vía indicada."""
        road = self.get_road(road_name)
        vehicle = Vehicle(road_name, position, vehicle_type, speed=speed, spawn_time=spawn_time)
        road.add_vehicle(vehicle)
        return vehicle

    def add_traffic_light(self, road_name: str, position: float, cycle: float) -> TrafficLight:
        """Crea un semáforo y lo asocia a la vía indicada."""
        road = self.get_road(road_name)
        light = TrafficLight(road_name, position, cycle)
        road.add_traffic_light(light)
        return light

    def add_bus_stop(self, road_name: str, position: float, wait_time: float) -> BusStop:
        """Crea una parada de bus y la asocia a la vía indicada."""
        road = self.get_road(road_name)
        stop = BusStop(road_name, position, wait_time)
        road.add_bus_stop(stop)
        return stop

    def add_intersection(self, connections: Sequence[RoadConnection],
                         policy: RoutingPolicy = RoutingPolicy.FIXED_PROBABILITY,
                         switch_probability: float = IntersectionConfig.SWITCH_PROBABILITY,
                         rng: Optional[np.random.Generator] = None) -> Intersection:
        """
        Crea una intersección y la asocia a cada vía que conecta.

        Args:
            connections: Conexiones (vía, posición)
            policy: Política de enrutamiento
            switch_probability: Probabilidad de cambio (política fija)
            rng: Generador propio de la intersección (opcional)

        Returns:
            Intersection: La intersección creada
        """
        intersection = Intersection(connections, self, policy, switch_probability, rng)
        self.intersections.append(intersection)

        for road_name in intersection.road_names:
            self.roads[road_name].add_intersection(intersection)

        # Aristas del grafo: traspasos posibles entrada -> salida
        for entry in intersection.entries:
            for target in intersection.connections:
                if target.road_name != entry.road_name:
                    self.graph.add_edge(entry.road_name, target.road_name,
                                        intersection=intersection)

        return intersection

    def get_all_traffic_lights(self) -> List[TrafficLight]:
        """Retorna todos los semáforos, en orden de vía."""
        return [light for road in self.roads.values() for light in road.traffic_lights]

    def get_all_vehicles(self) -> List[Vehicle]:
        """Retorna todos los vehículos en circulación, en orden de vía."""
        return [v for road in self.roads.values() for v in road.vehicles.values()]

    def get_vehicle_count(self) -> int:
        return sum(len(road.vehicles) for road in self.roads.values())

    def is_empty(self) -> bool:
        """True si ninguna vía tiene vehículos."""
        return all(road.is_empty() for road in self.roads.values())

    def get_reachable_roads(self, road_name: str) -> Set[str]:
        """
        Retorna las vías alcanzables desde una vía mediante intersecciones.

        Args:
            road_name: Vía de partida

        Returns:
            Set[str]: Nombres de vías alcanzables (sin incluir la de partida)
        """
        self.get_road(road_name)
        return set(nx.descendants(self.graph, road_name))

    def get_network_stats(self) -> Dict:
        """
        Calcula estadísticas de la red.

        Returns:
            dict: Diccionario con estadísticas de la red
        """
        total_length = sum(road.length for road in self.roads.values())
        avg_road_length = total_length / len(self.roads) if self.roads else 0

        return {
            'num_roads': len(self.roads),
            'num_intersections': len(self.intersections),
            'num_traffic_lights': len(self.get_all_traffic_lights()),
            'num_bus_stops': sum(len(r.bus_stops) for r in self.roads.values()),
            'num_vehicles': self.get_vehicle_count(),
            'total_length': total_length,
            'avg_road_length': avg_road_length,
            'is_connected': nx.is_weakly_connected(self.graph) if self.roads else False,
            'network_name': self.network_name
        }

    def visualize(self, show_labels: bool = True, figsize: Tuple[int, int] = (10, 6)):
        """
        Visualiza el grafo de vías.

        Args:
            show_labels: Si True, muestra nombres y longitudes de las vías
            figsize: Tamaño de la figura

        Returns:
            plt.Figure: Figura de matplotlib
        """
        fig = plt.figure(figsize=figsize)

        pos = nx.circular_layout(self.graph)

        # Vías con vehículos en rojo, vacías en celeste
        node_colors = ['#FF6B6B' if self.roads[name].vehicles else '#4ECDC4'
                       for name in self.graph.nodes()]

        nx.draw_networkx_nodes(self.graph, pos, node_color=node_colors,
                               node_size=800, alpha=0.9)
        nx.draw_networkx_edges(self.graph, pos, edge_color='gray',
                               width=2, alpha=0.6, arrows=True,
                               arrowsize=20, arrowstyle='->')

        if show_labels:
            labels = {name: f"{name}\n{self.roads[name].length:g}"
                      for name in self.graph.nodes()}
            nx.draw_networkx_labels(self.graph, pos, labels, font_size=8)

        plt.title(self.network_name or "Red vial", fontsize=14, fontweight='bold')
        plt.axis('off')
        plt.tight_layout()

        return fig

    def __str__(self) -> str:
        return f"TrafficNetwork('{self.network_name}', {len(self.roads)} roads)"

    def __repr__(self) -> str:
        stats = self.get_network_stats()
        return (f"TrafficNetwork(name='{self.network_name}', "
                f"roads={stats['num_roads']}, "
                f"intersections={stats['num_intersections']}, "
                f"vehicles={stats['num_vehicles']})")
