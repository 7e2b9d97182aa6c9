"""Built-in traits.

A trait is an independent capability attached to an :class:`Entity`. Entities
keep their traits in application order, so a trait attached later can look
up traits attached before it via ``host.get_trait``.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from xmlforge.models import Vec2, Vec3

if TYPE_CHECKING:
    from xmlforge.engine.entity import Entity


class Trait:
    NAME = "trait"

    def __init__(self) -> None:
        self.host: Entity | None = None
        self.enabled = True

    def attach(self, host: Entity) -> None:
        self.host = host

    def timeshift(self, dt: float) -> None:
        pass


class Attach(Trait):
    """Lets the host carry other objects standing on it."""

    NAME = "attach"

    def __init__(self) -> None:
        super().__init__()
        self.attached: list[Entity] = []
        self.offset = Vec3()


class Climbable(Trait):
    NAME = "climbable"


class Climber(Trait):
    NAME = "climber"

    def __init__(self) -> None:
        super().__init__()
        self.speed = 60.0
        self.attached: Entity | None = None


class ContactDamage(Trait):
    NAME = "contact_damage"

    def __init__(self) -> None:
        super().__init__()
        self.points = 1.0


class Conveyor(Trait):
    NAME = "conveyor"

    def __init__(self) -> None:
        super().__init__()
        self.speed = 40.0
        self.direction = Vec2(x=1, y=0)


class DeathSpawn(Trait):
    """Drops one of its pool's objects where the host dies."""

    NAME = "death_spawn"

    def __init__(self) -> None:
        super().__init__()
        self.chance = 1.0
        self.pool: list[Callable[[], Entity]] = []


class DeathZone(Trait):
    NAME = "death_zone"


class Destructible(Trait):
    NAME = "destructible"

    def __init__(self) -> None:
        super().__init__()
        self.affectors: set[str] = set()


class Disappearing(Trait):
    """Toggles the host on and off on a fixed cycle."""

    NAME = "disappearing"

    def __init__(self) -> None:
        super().__init__()
        self.on_duration = 2.0
        self.off_duration = 2.0
        self.offset = 0.0
        self.time = 0.0

    @property
    def visible(self) -> bool:
        cycle = self.on_duration + self.off_duration
        if cycle <= 0:
            return True
        return (self.time + self.offset) % cycle < self.on_duration

    def timeshift(self, dt: float) -> None:
        self.time += dt


class Door(Trait):
    NAME = "door"

    def __init__(self) -> None:
        super().__init__()
        self.direction = Vec2(x=0, y=0)
        self.one_way = False
        self.speed = 30.0


class Elevator(Trait):
    NAME = "elevator"

    def __init__(self) -> None:
        super().__init__()
        self.speed = 20.0
        self.nodes: list[Vec2] = []


class Environment(Trait):
    NAME = "environment"

    def __init__(self) -> None:
        super().__init__()
        self.atmosphere = 1.0


class Fallaway(Trait):
    NAME = "fallaway"

    def __init__(self) -> None:
        super().__init__()
        self.delay = 0.5


class FixedForce(Trait):
    NAME = "fixed_force"

    def __init__(self) -> None:
        super().__init__()
        self.force = Vec2()


class Glow(Trait):
    NAME = "glow"

    def __init__(self) -> None:
        super().__init__()
        self.intensity = 1.0
        self.radius = 16.0


class Headlight(Trait):
    NAME = "headlight"

    def __init__(self) -> None:
        super().__init__()
        self.intensity = 1.0
        self.distance = 300.0


class Health(Trait):
    NAME = "health"

    def __init__(self) -> None:
        super().__init__()
        self.max = 100.0
        self.amount = 1.0
        self.immune = False
        self.infinite = False


class Invincibility(Trait):
    NAME = "invincibility"

    def __init__(self) -> None:
        super().__init__()
        self.duration = 0.5
        self.engaged = False


class Jump(Trait):
    NAME = "jump"

    def __init__(self) -> None:
        super().__init__()
        self.force = 100.0
        self.duration = 0.18


class Lifetime(Trait):
    NAME = "lifetime"

    def __init__(self) -> None:
        super().__init__()
        self.duration = math.inf
        self.time = 0.0

    def timeshift(self, dt: float) -> None:
        self.time += dt


class Light(Trait):
    NAME = "light"

    def __init__(self) -> None:
        super().__init__()
        self.intensity = 1.0
        self.distance = 0.0


class LightControl(Trait):
    """Fades the scene's ambient light towards a target intensity."""

    NAME = "light_control"

    def __init__(self) -> None:
        super().__init__()
        self.intensity = 1.0
        self.duration = 1.0


class Move(Trait):
    NAME = "move"

    def __init__(self) -> None:
        super().__init__()
        self.speed = 90.0
        self.acceleration = 500.0


class Physics(Trait):
    NAME = "physics"

    def __init__(self) -> None:
        super().__init__()
        self.mass = 0.0
        self.area = 0.04
        self.drag = 0.0
        self.velocity = Vec2()


class Pickupable(Trait):
    NAME = "pickupable"

    def __init__(self) -> None:
        super().__init__()
        self.properties: dict[str, Any] = {}


class Projectile(Trait):
    NAME = "projectile"

    def __init__(self) -> None:
        super().__init__()
        self.damage = 1.0
        self.speed = 240.0
        self.penetrates = False


class Rotate(Trait):
    NAME = "rotate"

    def __init__(self) -> None:
        super().__init__()
        self.speed = 1.0
        self.angle = 0.0

    def timeshift(self, dt: float) -> None:
        self.angle += self.speed * dt


class Solid(Trait):
    NAME = "solid"

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    SURFACES = (TOP, BOTTOM, LEFT, RIGHT)

    def __init__(self) -> None:
        super().__init__()
        self.fixed = False
        self.obstructs = False
        self.attack_accept = list(self.SURFACES)


@dataclass
class SpawnCondition:
    event: str
    constructor: Callable[[], Entity]
    offset: Vec3 = field(default_factory=Vec3)


class Spawn(Trait):
    """Adds a new object to the host's world whenever a host event fires."""

    NAME = "spawn"

    def __init__(self) -> None:
        super().__init__()
        self.conditions: list[SpawnCondition] = []

    def add_condition(self, condition: SpawnCondition) -> None:
        self.conditions.append(condition)

    def attach(self, host: Entity) -> None:
        super().attach(host)
        for condition in self.conditions:
            host.events.bind(condition.event, lambda *_, c=condition: self.spawn(c))

    def spawn(self, condition: SpawnCondition) -> Entity | None:
        host = self.host
        if host is None or host.world is None:
            return None
        instance = condition.constructor()
        instance.position = host.position + condition.offset
        host.world.add_object(instance)
        return instance


class Stun(Trait):
    NAME = "stun"

    def __init__(self) -> None:
        super().__init__()
        self.duration = 0.5
        self.force = 100.0
        self.engaged = False


class Teleport(Trait):
    NAME = "teleport"

    def __init__(self) -> None:
        super().__init__()
        self.duration = 0.5
        self.destination = Vec3()


class Translate(Trait):
    NAME = "translate"

    def __init__(self) -> None:
        super().__init__()
        self.velocity = Vec2()

    def timeshift(self, dt: float) -> None:
        if self.host is None:
            return
        position = self.host.position
        self.host.position = Vec3(
            x=position.x + self.velocity.x * dt,
            y=position.y + self.velocity.y * dt,
            z=position.z,
        )


class Translating(Trait):
    """Moves the host back and forth along one axis."""

    NAME = "translating"

    def __init__(self) -> None:
        super().__init__()
        self.amplitude = Vec2()
        self.speed = 1.0


class Weapon(Trait):
    NAME = "weapon"

    def __init__(self) -> None:
        super().__init__()
        self.fire_rate = 4.0
        self.aim = Vec2(x=1, y=0)
