"""Compilers turning XML elements into animations, constructors and scenes."""

from xmlforge.compiler.animation import AnimationCompiler
from xmlforge.compiler.blueprint import Blueprint, CompiledEntry, EntityFactory
from xmlforge.compiler.camera import CameraCompiler
from xmlforge.compiler.context import CompileContext
from xmlforge.compiler.entity import EntityCompiler
from xmlforge.compiler.events import EventBinding, EventCompiler
from xmlforge.compiler.faces import FaceCompiler
from xmlforge.compiler.lazy import Once
from xmlforge.compiler.reader import Parser
from xmlforge.compiler.scene import Placement, SceneCompiler
from xmlforge.compiler.sequences import SequenceCompiler, SequenceDef
from xmlforge.compiler.traits import TraitCompiler, TraitFactory

__all__ = [
    "AnimationCompiler",
    "Blueprint",
    "CameraCompiler",
    "CompileContext",
    "CompiledEntry",
    "EntityCompiler",
    "EntityFactory",
    "EventBinding",
    "EventCompiler",
    "FaceCompiler",
    "Once",
    "Parser",
    "Placement",
    "SceneCompiler",
    "SequenceCompiler",
    "SequenceDef",
    "TraitCompiler",
    "TraitFactory",
]
