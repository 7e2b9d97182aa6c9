"""Runtime contract targeted by the compiler.

These classes store what compiled constructors hand them and expose the
methods the compiler calls. Rendering and physics live elsewhere.
"""

from xmlforge.engine import traits
from xmlforge.engine.animator import UVAnimator
from xmlforge.engine.entity import CollisionCircle, CollisionRect, Entity
from xmlforge.engine.events import EventBus, Sequencer
from xmlforge.engine.geometry import Material, Model, PlaneGeometry
from xmlforge.engine.scene import Camera, Game, Scene, World
from xmlforge.engine.traits import Trait

__all__ = [
    "Camera",
    "CollisionCircle",
    "CollisionRect",
    "Entity",
    "EventBus",
    "Game",
    "Material",
    "Model",
    "PlaneGeometry",
    "Scene",
    "Sequencer",
    "Trait",
    "UVAnimator",
    "World",
    "traits",
]
