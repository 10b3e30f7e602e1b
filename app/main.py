#!/usr/bin/env python3
from os import environ

environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import sys
from pathlib import Path
from typing import Dict, List, Optional

import pygame
from returns.result import Success
from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.traceback import install

from __version__ import __version_string__ as __version__
from chip8py.config import Config, Quirks, keypad_mapping, load_config
from chip8py.display import Display
from chip8py.emulator import Emulator
from chip8py.exception import EmulatorError
from chip8py.logger import console, setup_logging
from chip8py.resources import log_path
from chip8py.rom import Rom
from chip8py.trace import state_table

PIXEL_ON = (51, 255, 102)
PIXEL_OFF = (0, 0, 0)

debug_mode: bool = "--debug" in sys.argv
_log = setup_logging(debug_mode, log_path)


def _host_keymap(cfg: Config) -> Dict[int, int]:
    """pygame key code -> logical key index."""
    keymap: Dict[int, int] = {}
    for name, index in keypad_mapping(cfg).items():
        try:
            keymap[pygame.key.key_code(name)] = index
        except ValueError:
            _log.warning(f"Unknown host key {name!r} for keypad key {index:X}")
    return keymap


def _print_controls(cfg: Config, rom: Rom) -> None:
    console.print(Panel.fit(f"[bold cyan]chip8py [red]{__version__}[/red][/]", border_style="bright_blue"))
    console.print(f"[green]Loaded:[/green] {rom.file}\n")

    table = Table(title="Controls", box=box.ROUNDED, border_style="cyan")
    table.add_column("Key", justify="center")
    table.add_column("Action", justify="left")
    rows = [f"{k}={v.upper()}" for k, v in sorted(cfg["keyboard"].items())]
    table.add_row("  ".join(rows[:8]), "Keypad 0-7")
    table.add_row("  ".join(rows[8:]), "Keypad 8-F")
    table.add_row("P", "Pause/Unpause")
    table.add_row("F5", "Reset")
    table.add_row("F1", "Print machine state")
    table.add_row("ESC", "Quit")
    console.print(table)


def _render(screen: pygame.Surface, emulator: Emulator, scale: int) -> None:
    frame = emulator.display.frame()
    surf = pygame.Surface((Display.WIDTH, Display.HEIGHT))
    surf.fill(PIXEL_OFF)
    pixels = pygame.surfarray.pixels3d(surf)
    pixels[frame.T.astype(bool)] = PIXEL_ON
    del pixels
    screen.blit(pygame.transform.scale(surf, (Display.WIDTH * scale, Display.HEIGHT * scale)), (0, 0))
    pygame.display.flip()


def main(argv: Optional[List[str]] = None) -> int:
    args = [a for a in (sys.argv[1:] if argv is None else argv) if not a.startswith("--")]
    if not args:
        console.print("[bold red]usage:[/bold red] main.py ROM [--debug]")
        return 2

    cfg = load_config()
    install(console=console)

    result = Rom.from_file(Path(args[0]))
    if not isinstance(result, Success):
        _log.error(result.failure())
        return 1
    rom = result.unwrap()

    emulator = Emulator(quirks=Quirks.from_config(cfg), cycles_per_frame=cfg["general"]["cycles_per_frame"])
    emulator.debug.Logging = debug_mode
    emulator.Load(rom)

    scale = cfg["general"]["scale"]
    fps = cfg["general"]["fps"]

    pygame.init()
    screen = pygame.display.set_mode((Display.WIDTH * scale, Display.HEIGHT * scale))
    pygame.display.set_caption(f"chip8py - {rom.name}")
    clock = pygame.time.Clock()
    keymap = _host_keymap(cfg)

    beeper = None
    if cfg["sound"]["enable"]:
        try:
            from chip8py.beeper import Beeper

            beeper = Beeper(cfg["sound"]["frequency"], cfg["sound"]["volume"])
            emulator.on("sound")(beeper)
        except pygame.error as e:
            _log.warning(f"Sound disabled: {e}")

    _print_controls(cfg, rom)

    running = True
    paused = False
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
                pressed = event.type == pygame.KEYDOWN
                if event.key in keymap:
                    emulator.Input(keymap[event.key], pressed)
                elif not pressed:
                    continue
                elif event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                    console.print(f"[bold yellow]{'Paused' if paused else 'Resumed'}[/bold yellow]")
                elif event.key == pygame.K_F5:
                    console.print("[bold red]Resetting emulator...[/bold red]")
                    emulator.Reset()
                elif event.key == pygame.K_F1:
                    console.print(state_table(emulator))

        if not paused and not emulator.Architecture.Halted:
            try:
                emulator.run_Frame()
            except EmulatorError as e:
                _log.error(f"Emulation halted: {e}", exc_info=(type(e), e, e.__traceback__))
                emulator.Halt()
                pygame.display.set_caption(f"chip8py - {rom.name} [HALTED]")

        _render(screen, emulator, scale)
        clock.tick(fps)

    if beeper is not None:
        beeper.close()
    pygame.quit()
    console.print(f"\n[bold cyan]Emulator closed.[/bold cyan] Ran [green]{emulator.frame_count}[/green] frames.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
