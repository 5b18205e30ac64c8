"""
Discrete-time interaction model for a spinning shelf view.

The display loop is external: it calls advance(state, dt) once per tick and
feeds pointer events through the press/move/release helpers. Every helper
returns a new InteractionState; nothing is mutated in place.

A gesture either rotates the view or drags one dimension handle, never both.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np

import geometry
from config import HOME_DIMENSION_RANGE, HomeDimensions, round_half_up

logger = logging.getLogger(__name__)

HANDLE_WIDTH = 'width'
HANDLE_LENGTH = 'length'
HANDLE_HEIGHT = 'height'
HANDLE_CORNER = 'corner'
HANDLES = (HANDLE_WIDTH, HANDLE_LENGTH, HANDLE_HEIGHT, HANDLE_CORNER)

# Length of the probe vector used to find an axis direction on screen
AXIS_PROBE = 10.0
HEIGHT_HANDLE_OFFSET = 8.0
HEIGHT_SENSITIVITY = 2.5
MIN_DETERMINANT = 0.001


@dataclass(frozen=True)
class MotionSettings:
    """
    Constants of the spin animation. Speeds are radians per 60 Hz frame.

    Attributes:
        base_speed: Cruise speed the velocity relaxes toward (sign = direction)
        friction: Per-frame velocity decay
        blend_rate: Per-frame pull toward the target speed
        max_momentum: Largest speed a drag release can impart
        drag_gain: Radians of rotation per pixel dragged
        drag_velocity_gain: Scale from pixels per ms to drag velocity
        momentum_gain: Scale from drag velocity to release momentum
        min_drag_interval_ms: Floor on the time between pointer moves
        angle_bounds: Optional (min, max) degrees to oscillate between
        frame_rate: Frames per second the per-frame constants assume
    """
    base_speed: float = 0.0012
    friction: float = 0.97
    blend_rate: float = 0.01
    max_momentum: float = 0.05
    drag_gain: float = 0.005
    drag_velocity_gain: float = 0.002
    momentum_gain: float = 30.0
    min_drag_interval_ms: float = 8.0
    angle_bounds: Optional[Tuple[float, float]] = None
    frame_rate: float = 60.0


FLAT_MOTION = MotionSettings(base_speed=0.0012)
CORNER_MOTION = MotionSettings(base_speed=-0.0012)
HOME_MOTION = MotionSettings(base_speed=0.0012, angle_bounds=(-53.0, 40.0))


@dataclass(frozen=True)
class InteractionState:
    """
    Live view state for one session.

    Attributes:
        rotation: Current angle in radians, kept in [0, 2*pi)
        velocity: Current spin speed (radians per frame)
        target_speed: Speed the spin relaxes toward
        rotating: True while a rotation drag is in progress
        dragging_handle: Name of the handle being dragged, or None
        last_x: Last pointer x (pixels)
        last_y: Last pointer y (pixels)
        last_time_ms: Time of the last rotation-drag event
        drag_velocity: Spin speed measured during the current drag
    """
    rotation: float = 0.0
    velocity: float = 0.0
    target_speed: float = 0.0012
    rotating: bool = False
    dragging_handle: Optional[str] = None
    last_x: float = 0.0
    last_y: float = 0.0
    last_time_ms: float = 0.0
    drag_velocity: float = 0.0

    @property
    def is_dragging(self) -> bool:
        return self.rotating or self.dragging_handle is not None


def initial_state(engine_name: str) -> InteractionState:
    """Starting angle and spin for each engine's view."""
    if engine_name == 'flat':
        return InteractionState(rotation=4.75, velocity=-0.0008,
                                target_speed=FLAT_MOTION.base_speed)
    if engine_name == 'corner':
        return InteractionState(rotation=math.radians(20), velocity=0.0008,
                                target_speed=CORNER_MOTION.base_speed)
    if engine_name == 'home':
        return InteractionState(rotation=math.radians(344), velocity=0.0008,
                                target_speed=-HOME_MOTION.base_speed)
    raise ValueError(f"Unknown engine: {engine_name}")


def motion_settings(engine_name: str) -> MotionSettings:
    return {'flat': FLAT_MOTION, 'corner': CORNER_MOTION, 'home': HOME_MOTION}[engine_name]


def signed_degrees(angle: float) -> float:
    """Angle in radians as degrees in (-180, 180]."""
    deg = math.degrees(angle) % 360
    if deg > 180:
        deg -= 360
    return deg


def advance(state: InteractionState, dt: float,
            settings: MotionSettings = MotionSettings()) -> InteractionState:
    """
    Step the spin animation forward by dt seconds.

    While a drag is in progress the angle is left alone; the drag itself
    moves the view.

    Args:
        state: Current state
        dt: Elapsed time in seconds
        settings: Motion constants

    Returns:
        New InteractionState
    """
    if state.is_dragging:
        return state
    frames = dt * settings.frame_rate
    if not math.isfinite(frames) or frames <= 0:
        return state

    velocity = state.velocity * settings.friction ** frames
    blend = 1 - (1 - settings.blend_rate) ** frames
    velocity = velocity + (state.target_speed - velocity) * blend
    rotation = state.rotation + state.velocity * frames

    target = state.target_speed
    if settings.angle_bounds is not None:
        low, high = settings.angle_bounds
        deg = signed_degrees(rotation)
        if deg <= low and target < 0:
            target = abs(settings.base_speed)
        elif deg >= high and target > 0:
            target = -abs(settings.base_speed)

    return replace(state, rotation=geometry.wrap_angle(rotation),
                   velocity=velocity, target_speed=target)


def press(state: InteractionState, x: float, time_ms: float) -> InteractionState:
    """Pointer down on the view: start a rotation drag unless a handle is held."""
    if state.dragging_handle is not None:
        return state
    return replace(state, rotating=True, last_x=x, last_time_ms=time_ms, drag_velocity=0.0)


def move(state: InteractionState, x: float, time_ms: float,
         settings: MotionSettings = MotionSettings()) -> InteractionState:
    """Pointer move during a rotation drag: turn the view with the pointer."""
    if not state.rotating:
        return state
    delta_x = x - state.last_x
    delta_t = time_ms - state.last_time_ms
    drag_velocity = state.drag_velocity
    if delta_t > 0:
        drag_velocity = (delta_x * settings.drag_velocity_gain
                         / max(delta_t, settings.min_drag_interval_ms))
    rotation = geometry.wrap_angle(state.rotation + delta_x * settings.drag_gain)
    return replace(state, rotation=rotation, drag_velocity=drag_velocity,
                   last_x=x, last_time_ms=time_ms)


def release(state: InteractionState,
            settings: MotionSettings = MotionSettings()) -> InteractionState:
    """
    Pointer up, or pointer left the view.

    Ends a handle drag, or turns a rotation drag into spin momentum clamped
    to settings.max_momentum.
    """
    if state.dragging_handle is not None:
        return replace(state, dragging_handle=None)
    if state.rotating:
        limit = settings.max_momentum
        momentum = max(-limit, min(limit, state.drag_velocity * settings.momentum_gain))
        return replace(state, rotating=False, velocity=momentum)
    return state


leave = release


def start_handle_drag(state: InteractionState, handle: str,
                      x: float, y: float) -> InteractionState:
    """
    Pointer down on a dimension handle.

    Raises:
        ValueError: If the handle name is unknown
    """
    if handle not in HANDLES:
        raise ValueError(f"Unknown handle: {handle}")
    if state.rotating:
        return state
    return replace(state, dragging_handle=handle, last_x=x, last_y=y)


def _project_handle(point, dims: HomeDimensions, rotation: float) -> np.ndarray:
    pivot = (dims.width / 2, dims.length / 2)
    return geometry.rotate_and_project(np.array(point, dtype=float), rotation, pivot)


def axis_screen_vector(axis: str, dims: HomeDimensions,
                       rotation: float) -> np.ndarray:
    """
    Screen direction of a probe step along a handle's axis.

    Width runs along x at y=length, length along y at x=0, and height
    straight up beside the y-axis wall.
    """
    length = dims.length
    if axis == HANDLE_WIDTH:
        start, end = (0, length, 0), (AXIS_PROBE, length, 0)
    elif axis == HANDLE_LENGTH:
        start, end = (0, 0, 0), (0, AXIS_PROBE, 0)
    else:
        start = (-HEIGHT_HANDLE_OFFSET, length, 0)
        end = (-HEIGHT_HANDLE_OFFSET, length, AXIS_PROBE)
    return _project_handle(end, dims, rotation) - _project_handle(start, dims, rotation)


def screen_delta_to_axis_delta(screen_dx: float, screen_dy: float, axis: str,
                               dims: HomeDimensions, rotation: float) -> float:
    """
    Dimension change for a screen-space drag along one handle axis.

    The drag is projected onto the axis direction. Height gets extra
    sensitivity; width and length are inverted because their handles sit
    at the origin end of the axis.
    """
    vec = axis_screen_vector(axis, dims, rotation)
    length_sq = float(vec @ vec)
    if length_sq < MIN_DETERMINANT ** 2:
        return 0.0
    delta = (screen_dx * vec[0] + screen_dy * vec[1]) / length_sq * AXIS_PROBE
    if axis == HANDLE_HEIGHT:
        delta *= HEIGHT_SENSITIVITY
    return -delta if axis in (HANDLE_WIDTH, HANDLE_LENGTH) else delta


def solve_floor_delta(axis_x, axis_y, screen_dx: float,
                      screen_dy: float) -> Optional[Tuple[float, float]]:
    """
    Invert a screen drag into a floor-plane (x, y) move.

    Solves [axis_x axis_y] @ [dx, dy] = [screen_dx, screen_dy].

    Returns:
        (dx, dy) in probe units, or None when the basis is near singular
    """
    ax, ay = axis_x
    bx, by = axis_y
    det = ax * by - bx * ay
    if not abs(det) > MIN_DETERMINANT:
        return None
    return ((by * screen_dx - bx * screen_dy) / det,
            (-ay * screen_dx + ax * screen_dy) / det)


def _clamp_dimension(value: float) -> float:
    return float(round_half_up(HOME_DIMENSION_RANGE.clamp(value)))


def drag_handle(state: InteractionState, dims: HomeDimensions, x: float, y: float,
                units_per_pixel: Tuple[float, float] = (1.0, 1.0)
                ) -> Tuple[InteractionState, HomeDimensions]:
    """
    Pointer move while a dimension handle is held.

    Args:
        state: Current state (dragging_handle must be set)
        dims: Current user dimensions
        x: Pointer x (pixels)
        y: Pointer y (pixels)
        units_per_pixel: View box units per screen pixel (x, y)

    Returns:
        (new state, new dimensions). The dimensions are unchanged when the
        update would be singular or non-finite.
    """
    handle = state.dragging_handle
    if handle is None:
        return state, dims

    screen_dx = (x - state.last_x) * units_per_pixel[0]
    screen_dy = (y - state.last_y) * units_per_pixel[1]
    new_state = replace(state, last_x=x, last_y=y)

    if handle == HANDLE_CORNER:
        origin = _project_handle((0, 0, 0), dims, state.rotation)
        axis_x = _project_handle((AXIS_PROBE, 0, 0), dims, state.rotation) - origin
        axis_y = _project_handle((0, AXIS_PROBE, 0), dims, state.rotation) - origin
        solved = solve_floor_delta(axis_x, axis_y, screen_dx, screen_dy)
        if solved is None:
            logger.debug("Skipping corner drag: near-singular floor basis")
            return new_state, dims
        width_delta, length_delta = (v * AXIS_PROBE for v in solved)
        if not (math.isfinite(width_delta) and math.isfinite(length_delta)):
            logger.debug("Skipping corner drag: non-finite delta")
            return new_state, dims
        return new_state, replace(
            dims,
            width=_clamp_dimension(dims.width + width_delta),
            length=_clamp_dimension(dims.length + length_delta),
        )

    axis_delta = screen_delta_to_axis_delta(screen_dx, screen_dy, handle, dims, state.rotation)
    if not math.isfinite(axis_delta):
        logger.debug("Skipping %s drag: non-finite delta", handle)
        return new_state, dims
    current = getattr(dims, handle)
    return new_state, replace(dims, **{handle: _clamp_dimension(current + axis_delta)})


def apply_slider(params, name: str, value: float):
    """
    Set one parameter from a slider and re-clamp the whole snapshot.

    Non-finite values leave the parameters unchanged.
    """
    if not math.isfinite(value):
        logger.debug("Ignoring non-finite value for %s", name)
        return params
    return replace(params, **{name: value}).clamped()
