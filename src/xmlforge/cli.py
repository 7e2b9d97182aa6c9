"""CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

app = typer.Typer(
    name="xmlforge",
    help="Compile declarative XML game content into engine constructors.",
    no_args_is_help=True,
)


@app.command("compile")
def compile_scene(
    path: Annotated[Path, typer.Argument(help="Scene document (.xml)")],
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Base url for documents loaded without one"),
    ] = None,
) -> None:
    """Compile a scene document and print a summary."""
    import asyncio

    from xmlforge.config import load_config
    from xmlforge.errors import ForgeError
    from xmlforge.loader import DocumentLoader

    config = load_config()
    if base_url is not None:
        config.base_url = base_url
    loader = DocumentLoader(config)

    try:
        scene = asyncio.run(loader.load_scene(str(path)))
    except ForgeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Scene: {scene.name or '(unnamed)'}")
    typer.echo(f"  Gravity: ({scene.world.gravity.x:g}, {scene.world.gravity.y:g})")
    typer.echo(f"  Audio clips: {len(scene.audio)}")
    typer.echo(f"  Camera paths: {len(scene.camera.paths)}")
    typer.echo(f"  World objects: {len(scene.world.objects)}")
    for obj in scene.world.objects:
        label = obj.name or type(obj).__name__
        if obj.id:
            label = f"{label} #{obj.id}"
        typer.echo(f"    - {label} at ({obj.position.x:g}, {obj.position.y:g}, {obj.position.z:g})")


@app.command()
def objects(
    path: Annotated[Path, typer.Argument(help="Document with an <entities> or <objects> root")],
) -> None:
    """List the constructors defined by an entities/objects document."""
    import asyncio

    from xmlforge.compiler import EntityCompiler
    from xmlforge.config import load_config
    from xmlforge.errors import ForgeError
    from xmlforge.loader import DocumentLoader

    loader = DocumentLoader(load_config())

    async def _run() -> dict:
        root = await loader.load_xml(str(path))
        return await EntityCompiler(loader, root).get_objects()

    try:
        compiled = asyncio.run(_run())
    except (ForgeError, TypeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    for object_id, entry in compiled.items():
        blueprint = entry.constructor.blueprint
        animations = {id(animation) for animation in blueprint.animations.values()}
        typer.echo(
            f"{object_id}: {len(animations)} animations, "
            f"{len(blueprint.traits)} traits, {len(blueprint.collision)} collision zones",
        )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool, typer.Option("--version", "-v", help="Show version")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log compiler progress")
    ] = False,
) -> None:
    """xmlforge - declarative XML game content compiler."""
    if version:
        from xmlforge import __version__

        typer.echo(f"xmlforge {__version__}")
        raise typer.Exit()
    if verbose:
        import logging

        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
