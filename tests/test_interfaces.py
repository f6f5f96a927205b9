"""
Tests for the virtualblobs.interfaces module.
"""

import asyncio

import pytest

from virtualblobs.exceptions import AlreadyExistsError
from virtualblobs.interfaces import StorageFile, StorageFolder, StorageProvider, swallow_errors


async def _succeed():
    return "ignored"


async def _fail(exc):
    raise exc


class TestSwallowErrors:
    """Tests for the boolean adapter behind the try-variants."""

    @pytest.mark.asyncio
    async def test_success_is_true(self):
        assert await swallow_errors(_succeed(), "op", "path") is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("exc", [
        AlreadyExistsError("exists"),
        OSError("disk full"),
        RuntimeError("unexpected"),
    ])
    async def test_errors_are_false(self, exc):
        assert await swallow_errors(_fail(exc), "op", "path") is False

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """Test that cancelling a try-variant is not turned into False."""
        with pytest.raises(asyncio.CancelledError):
            await swallow_errors(_fail(asyncio.CancelledError()), "op", "path")


class TestAbstractInterfaces:
    """The interfaces cannot be instantiated directly."""

    @pytest.mark.parametrize("interface", [StorageFile, StorageFolder, StorageProvider])
    def test_not_instantiable(self, interface):
        with pytest.raises(TypeError):
            interface()
