"""Operation mixes and the pools of objects that mixed benchmarks work on."""

from __future__ import annotations

import dataclasses
import random
import threading
from collections.abc import Callable, Mapping

from warpbench.generator.objects import Object

GENERATED_OPS = 1000
_SEED = 0xABAD1DEA


def _normalized(distribution: dict[str, float]) -> dict[str, float]:
    """Return the distribution scaled so its shares add up to one."""
    for op, share in distribution.items():
        if share < 0:
            raise ValueError(f'negative distribution requested for op "{op}"')
    total = sum(distribution.values())
    if total == 0:
        raise ValueError("no distribution set, total is 0")
    return {op: share / total for op, share in distribution.items()}


def _expand(distribution: Mapping[str, float], rng: random.Random) -> list[str]:
    """Return a shuffled list of about GENERATED_OPS operations in proportion."""
    ops = [
        op
        for op, share in distribution.items()
        for _ in range(int(0.5 + share * GENERATED_OPS))
    ]
    rng.shuffle(ops)
    return ops


class _OpCycle:
    """Hands out operations from a generated list, round robin."""

    def __init__(self) -> None:
        self._ops: list[str] = []
        self._current = 0

    def load(self, ops: list[str]) -> None:
        self._ops = ops
        self._current = 0

    def next(self) -> str:
        if not self._ops:
            raise RuntimeError("no operations generated")
        op = self._ops[self._current]
        self._current = (self._current + 1) % len(self._ops)
        return op


class MixedDistribution:
    """Tracks the operation mix and the objects currently available."""

    def __init__(self, distribution: Mapping[str, float]) -> None:
        self.distribution: dict[str, float] = dict(distribution)
        self._objects: dict[str, Object] = {}
        self._rng = random.Random(_SEED)
        self._cycle = _OpCycle()
        self._lock = threading.Lock()

    def generate(self, alloc_objs: int = 0) -> None:
        """Validate and normalize the mix and build the operation sequence."""
        if self.distribution.get("DELETE", 0.0) > self.distribution.get("PUT", 0.0):
            raise ValueError("DELETE distribution cannot be bigger than PUT")
        self._objects = {}
        self.distribution = _normalized(self.distribution)
        self._rng = random.Random(_SEED)
        self._cycle.load(_expand(self.distribution, self._rng))

    def objects(self) -> list[Object]:
        """Return the objects currently available."""
        with self._lock:
            return list(self._objects.values())

    def _take(self) -> tuple[str, Object]:
        if not self._objects:
            raise RuntimeError("ran out of objects")
        key = self._rng.choice(list(self._objects))
        return key, self._objects.pop(key)

    def random_obj(self) -> tuple[Object, Callable[[], None]]:
        """Take a random object out of the pool.

        The returned callable puts it back once the caller is done with it.
        """
        with self._lock:
            key, obj = self._take()

        def done() -> None:
            with self._lock:
                self._objects[key] = obj

        return obj, done

    def delete_random_obj(self) -> Object:
        """Remove a random object from the pool for good and return it."""
        with self._lock:
            return self._take()[1]

    def add_obj(self, obj: Object) -> None:
        """Add an object to the pool, replacing any with the same name."""
        with self._lock:
            self._objects[obj.name] = obj

    def get_op(self) -> str:
        """Return the next operation to run."""
        with self._lock:
            return self._cycle.next()


class VersionedDistribution:
    """Tracks the operation mix and the object versions currently available."""

    def __init__(self, distribution: Mapping[str, float]) -> None:
        self.distribution: dict[str, float] = dict(distribution)
        self._objects: dict[str, list[Object]] = {}
        self._rng = random.Random(_SEED)
        self._cycle = _OpCycle()
        self._lock = threading.Lock()

    def generate(self, alloc_objs: int = 0) -> None:
        """Validate and normalize the mix and build the operation sequence."""
        self._objects = {}
        self.distribution = _normalized(self.distribution)
        self._rng = random.Random(_SEED)
        self._cycle.load(_expand(self.distribution, self._rng))

    def objects(self) -> list[Object]:
        """Return every available version of every object."""
        with self._lock:
            return [obj for versions in self._objects.values() for obj in versions]

    def _take(self) -> tuple[str, Object]:
        keys = [key for key, versions in self._objects.items() if versions]
        if not keys:
            raise RuntimeError("ran out of objects")
        key = self._rng.choice(keys)
        versions = self._objects[key]
        return key, versions.pop(self._rng.randrange(len(versions)))

    def random_obj_read(self) -> tuple[Object, Callable[[], None]]:
        """Take a random version out of the pool so it is not deleted meanwhile.

        The returned callable puts it back.
        """
        with self._lock:
            key, obj = self._take()

        def done() -> None:
            with self._lock:
                self._objects.setdefault(key, []).append(obj)

        return obj, done

    def delete_random_obj(self) -> Object:
        """Remove a random version from the pool for good and return it."""
        with self._lock:
            return self._take()[1]

    def new_version(self, obj: Object) -> tuple[Object, Callable[[str], None]]:
        """Turn ``obj`` into a new version of a random existing object.

        The returned callable takes the version id of the upload; a non-empty
        id adds the new version to the pool. The existing object is held back
        until then so it cannot be deleted.
        """
        existing, release = self.random_obj_read()
        version = dataclasses.replace(
            obj, version_id="", name=existing.name, prefix=existing.prefix
        )

        def done(version_id: str) -> None:
            if version_id:
                self.add_obj(dataclasses.replace(version, version_id=version_id))
            release()

        return dataclasses.replace(version), done

    def add_obj(self, obj: Object) -> None:
        """Add a version of an object to the pool."""
        with self._lock:
            self._objects.setdefault(obj.name, []).append(obj)

    def get_op(self) -> str:
        """Return the next operation to run."""
        with self._lock:
            return self._cycle.next()