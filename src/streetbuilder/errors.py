"""
Exception hierarchy for streetbuilder.

Every error raised by the package derives from StreetBuilderError so that
hosts can catch library failures with a single except clause. Mission-level
failures (no targets, empty plans, material shortage) are NOT exceptions:
the mission controller expresses them as phase transitions. The classes here
cover primitive failures (world actions), planner failures, and programming
errors such as loading a non-empty queue.

Dependencies:
    None (leaf module)
"""

from __future__ import annotations


class StreetBuilderError(Exception):
    """Base class for all streetbuilder errors."""


# =============================================================================
# WORLD PRIMITIVE ERRORS
# =============================================================================


class WorldError(StreetBuilderError):
    """A world primitive (go, teleport, destroy, put, discover) was refused."""


class NotEnoughEnergy(WorldError):
    """The robot cannot pay the energy cost of the primitive."""


class OutOfBounds(WorldError):
    """The primitive targets a coordinate outside the grid."""


class CannotWalk(WorldError):
    """The destination tile is not walkable or is blocked by its content."""


class NoContent(WorldError):
    """The targeted tile holds no content to destroy."""


class WrongContent(WorldError):
    """The targeted tile holds a different content than the one requested."""


class NotEnoughSpace(WorldError):
    """The backpack has no room left."""


class NotEnoughContentInBackPack(WorldError):
    """The backpack does not hold enough of the requested content."""


class CannotPut(WorldError):
    """The content cannot be placed on the targeted tile."""


class NotOnTeleport(WorldError):
    """Teleporting requires standing on a teleport tile."""


# =============================================================================
# AGENT ERRORS
# =============================================================================


class RouteNotFound(StreetBuilderError):
    """The planner has no route from the current position to the target."""


class QueueError(StreetBuilderError):
    """A queue was used against its contract (e.g. refilled while non-empty)."""


class InvalidTransitionError(StreetBuilderError):
    """A phase handler returned a successor outside its allowed set."""
