"""Interactive command session over a loaded image."""
import logging
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TextIO

from regiontrace.contour_tracing import trace_perimeters
from regiontrace.display import Viewer, render_overlay, show_image
from regiontrace.perimeter_smoothing import smooth_perimeters
from regiontrace.region_growing import grow_region
from regiontrace.storage import store
from regiontrace.types import (
    ImageArray,
    Mask,
    PerimeterSet,
    Point,
    SegmentationError,
    TraceConfig,
)

logger = logging.getLogger(__name__)

WINDOW_NAME = "Image"


@dataclass
class SessionState:
    """Everything a command may read or change."""
    image: ImageArray
    config: TraceConfig = field(default_factory=TraceConfig)
    regions: List[Mask] = field(default_factory=list)
    perimeters: List[PerimeterSet] = field(default_factory=list)
    running: bool = True


class UsageError(Exception):
    """Command arguments could not be parsed."""
    pass


@dataclass
class Command:
    """A named command with its handler and help text."""
    name: str
    usage: str
    description: str
    handler: Callable[["CommandDispatcher", SessionState, List[str]], None]


def _expect_args(args: List[str], count: int) -> None:
    if len(args) != count:
        raise UsageError(f"expected {count} argument(s), got {len(args)}")


def _fit_channels(tolerance, channels: int):
    """Collapse a uniform tolerance to the image's channel count."""
    if len(tolerance) != channels and len(set(tolerance)) == 1:
        return tolerance[0]
    return tolerance


def region_command(dispatcher: "CommandDispatcher", state: SessionState, args: List[str]) -> None:
    _expect_args(args, 2)
    try:
        seed = Point(int(args[0]), int(args[1]))
    except ValueError:
        raise UsageError(f"coordinates must be integers, got {' '.join(args)}")

    config = state.config
    channels = 1 if state.image.ndim == 2 else state.image.shape[2]
    upper_bound = _fit_channels(config.upper_bound, channels)
    step_diff = _fit_channels(config.step_diff, channels)

    region = grow_region(state.image, seed, upper_bound, step_diff)
    perimeters = trace_perimeters(region)

    state.regions.append(region)
    state.perimeters.append(perimeters)

    dispatcher.write(
        f"Region {len(state.regions) - 1}: {int(region.sum())} pixels, "
        f"{len(perimeters)} perimeter(s)\n"
    )
    logger.info(f"Added region from seed {seed}")


def display_command(dispatcher: "CommandDispatcher", state: SessionState, args: List[str]) -> None:
    _expect_args(args, 0)
    overlay = render_overlay(state.image, state.regions, state.perimeters, state.config)
    dispatcher.viewer(overlay, WINDOW_NAME)


def smooth_command(dispatcher: "CommandDispatcher", state: SessionState, args: List[str]) -> None:
    _expect_args(args, 1)
    try:
        factor = float(args[0])
    except ValueError:
        raise UsageError(f"factor must be a number, got {args[0]}")

    kernel = state.config.smoothing_kernel
    state.perimeters = [
        smooth_perimeters(perimeter_set, factor, kernel) for perimeter_set in state.perimeters
    ]
    logger.info(f"Smoothed {len(state.perimeters)} perimeter set(s) with {kernel} kernel, factor {factor}")


def clean_command(dispatcher: "CommandDispatcher", state: SessionState, args: List[str]) -> None:
    _expect_args(args, 0)
    state.regions.clear()
    state.perimeters.clear()
    logger.info("Cleared all regions")


def store_command(dispatcher: "CommandDispatcher", state: SessionState, args: List[str]) -> None:
    _expect_args(args, 1)
    try:
        store(state.regions, state.perimeters, args[0])
    except OSError as e:
        dispatcher.write(f"Could not write \"{args[0]}\": {e}\n")


def help_command(dispatcher: "CommandDispatcher", state: SessionState, args: List[str]) -> None:
    dispatcher.write(dispatcher.help_text() + "\n")


def exit_command(dispatcher: "CommandDispatcher", state: SessionState, args: List[str]) -> None:
    state.running = False


DEFAULT_COMMANDS = (
    Command("region", "region <x> <y>", "add new region", region_command),
    Command("display", "display", "show regions and perimeters in a window", display_command),
    Command("clean", "clean", "delete all regions", clean_command),
    Command("smooth", "smooth <factor>", "smooth perimeters", smooth_command),
    Command("store", "store <file name>", "store regions and perimeters data into a file", store_command),
    Command("help", "help", "show a list of commands", help_command),
    Command("exit", "exit", "terminate the program", exit_command),
)


class CommandDispatcher:
    """Matches command lines to handlers that act on a SessionState."""

    def __init__(
        self,
        commands=DEFAULT_COMMANDS,
        viewer: Optional[Viewer] = None,
        output: Optional[TextIO] = None
    ):
        self.commands: Dict[str, Command] = {c.name: c for c in commands}
        self.viewer = viewer if viewer is not None else show_image
        self.output = output if output is not None else sys.stdout

    def write(self, text: str) -> None:
        self.output.write(text)

    def help_text(self) -> str:
        lines = ["Supported commands:"]
        for command in self.commands.values():
            lines.append(f"    {command.usage} - {command.description}")
        return "\n".join(lines)

    def dispatch(self, state: SessionState, line: str) -> None:
        """
        Run one command line against the session.

        Unknown commands, bad arguments and pipeline errors are reported to
        the output; the session keeps going.
        """
        tokens = line.split()
        if not tokens:
            return

        name, args = tokens[0], tokens[1:]
        command = self.commands.get(name)
        if command is None:
            self.write(f"Command \"{name}\" does not exist. Type \"help\" for a list of commands.\n")
            return

        try:
            command.handler(self, state, args)
        except UsageError as e:
            self.write(f"Usage: {command.usage} ({e})\n")
        except SegmentationError as e:
            logger.warning(f"Command '{name}' failed: {e}")
            self.write(f"Error: {e}\n")


def run_command_loop(
    state: SessionState,
    dispatcher: CommandDispatcher,
    stdin: Optional[TextIO] = None,
    prompt: str = ">"
) -> None:
    """Read and dispatch commands until ``exit`` or end of input."""
    stdin = stdin if stdin is not None else sys.stdin

    while state.running:
        dispatcher.write(prompt)
        dispatcher.output.flush()

        line = stdin.readline()
        if not line:
            dispatcher.write("\n")
            break

        dispatcher.dispatch(state, line)
