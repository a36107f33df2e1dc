"""Tests for TranscodeExecutor and its hardware fallback state machine."""

import asyncio
from pathlib import Path

import pytest

from videocompress.core.subprocess_utils import ProcessResult, ProcessTimeoutError
from videocompress.executor.errors import (
    OutputInvalidError,
    TranscodeFailedError,
    TranscodeTimeoutError,
)
from videocompress.executor.transcode import InvokerState, TranscodeExecutor
from videocompress.policy import build_encode_profile
from videocompress.policy.types import (
    MEBIBYTE,
    EncodeRequest,
    HardwareAccel,
    SpeedMode,
)


class FakeRunner:
    """Records commands and replays scripted results.

    Each result is a returncode, or an exception to raise. A zero exit
    writes output_bytes to the output path (the last argument).
    """

    def __init__(self, *results, output_bytes: int = 4096):
        self.results = list(results)
        self.output_bytes = output_bytes
        self.calls: list[tuple[list[str], float | None]] = []

    async def __call__(self, cmd, timeout):
        self.calls.append((cmd, timeout))
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            Path(cmd[-1]).write_bytes(b"partial")
            raise result
        if result == 0:
            Path(cmd[-1]).write_bytes(b"\0" * self.output_bytes)
        else:
            Path(cmd[-1]).write_bytes(b"partial")
        return ProcessResult(
            returncode=result,
            stderr="frame=1\nError: encoder failed\n" if result else "",
            elapsed_seconds=0.01,
        )


@pytest.fixture
def paths(tmp_path: Path) -> tuple[Path, Path]:
    input_path = tmp_path / "in.mov"
    input_path.write_bytes(b"input")
    return input_path, tmp_path / "out.mp4"


def hardware_profile():
    return build_encode_profile(
        EncodeRequest(mode=SpeedMode.FAST, hardware=HardwareAccel.VIDEOTOOLBOX),
        100 * MEBIBYTE,
    )


def software_profile():
    return build_encode_profile(EncodeRequest(mode=SpeedMode.FAST), 100 * MEBIBYTE)


class TestSoftwareRun:
    """Tests for runs without hardware acceleration."""

    async def test_success(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(0)
        executor = TranscodeExecutor("ffmpeg", runner=runner)

        outcome = await executor.run(software_profile(), input_path, output_path)

        assert executor.state is InvokerState.SUCCEEDED
        assert outcome.output_bytes == 4096
        assert outcome.used_fallback is False
        assert len(runner.calls) == 1

    async def test_failure_is_not_retried(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(1)
        executor = TranscodeExecutor("ffmpeg", runner=runner)

        with pytest.raises(TranscodeFailedError) as exc_info:
            await executor.run(software_profile(), input_path, output_path)

        assert len(runner.calls) == 1
        assert executor.state is InvokerState.FAILED
        assert exc_info.value.returncode == 1
        assert "Error: encoder failed" in str(exc_info.value)
        assert not output_path.exists()


class TestHardwareFallback:
    """Tests for the hardware to software retry."""

    async def test_hardware_success_runs_once(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(0)
        executor = TranscodeExecutor("ffmpeg", runner=runner)

        outcome = await executor.run(hardware_profile(), input_path, output_path)

        assert len(runner.calls) == 1
        assert outcome.profile.hardware is HardwareAccel.VIDEOTOOLBOX

    async def test_hardware_failure_retries_exactly_once_in_software(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(1, 0)
        executor = TranscodeExecutor("ffmpeg", runner=runner)

        outcome = await executor.run(hardware_profile(), input_path, output_path)

        assert len(runner.calls) == 2
        first, second = runner.calls[0][0], runner.calls[1][0]
        assert "h264_videotoolbox" in first
        assert "-hwaccel" not in second
        assert "libx264" in second
        assert outcome.used_fallback is True
        assert outcome.profile.hardware is HardwareAccel.NONE
        assert [a.state for a in outcome.attempts] == [
            InvokerState.RUNNING_HARDWARE,
            InvokerState.RUNNING_SOFTWARE_RETRY,
        ]

    async def test_both_attempts_failing_raises(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(1, 1)
        executor = TranscodeExecutor("ffmpeg", runner=runner)

        with pytest.raises(TranscodeFailedError) as exc_info:
            await executor.run(hardware_profile(), input_path, output_path)

        assert len(runner.calls) == 2
        assert exc_info.value.attempts == 2
        assert not output_path.exists()


class TestTimeoutsAndValidation:
    """Tests for deadline handling, cancellation and output validation."""

    async def test_timeout_is_not_retried(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(ProcessTimeoutError(5.0))
        executor = TranscodeExecutor("ffmpeg", timeout=5.0, runner=runner)

        with pytest.raises(TranscodeTimeoutError):
            await executor.run(hardware_profile(), input_path, output_path)

        assert len(runner.calls) == 1
        assert executor.state is InvokerState.FAILED
        assert not output_path.exists()

    async def test_deadline_is_shared_between_attempts(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(1, 0)
        executor = TranscodeExecutor("ffmpeg", timeout=60.0, runner=runner)

        await executor.run(hardware_profile(), input_path, output_path)

        first_timeout, second_timeout = runner.calls[0][1], runner.calls[1][1]
        assert 0 < second_timeout <= first_timeout <= 60.0

    async def test_cancellation_removes_partial_output(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(asyncio.CancelledError())
        executor = TranscodeExecutor("ffmpeg", runner=runner)

        with pytest.raises(asyncio.CancelledError):
            await executor.run(software_profile(), input_path, output_path)

        assert executor.state is InvokerState.FAILED
        assert not output_path.exists()

    async def test_spawn_failure_raises_transcode_failed(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(FileNotFoundError(2, "No such file", "ffmpeg"))
        executor = TranscodeExecutor("ffmpeg", runner=runner)

        with pytest.raises(
            TranscodeFailedError, match="Could not start ffmpeg"
        ) as exc_info:
            await executor.run(hardware_profile(), input_path, output_path)

        assert exc_info.value.returncode is None
        assert len(runner.calls) == 1
        assert executor.state is InvokerState.FAILED
        assert not output_path.exists()

    async def test_missing_binary_with_real_runner(self, paths, tmp_path: Path):
        input_path, output_path = paths
        executor = TranscodeExecutor(tmp_path / "no-such-ffmpeg")

        with pytest.raises(TranscodeFailedError):
            await executor.run(software_profile(), input_path, output_path)

        assert not output_path.exists()

    async def test_tiny_output_is_invalid(self, paths):
        input_path, output_path = paths
        runner = FakeRunner(0, output_bytes=100)
        executor = TranscodeExecutor("ffmpeg", runner=runner)

        with pytest.raises(OutputInvalidError) as exc_info:
            await executor.run(software_profile(), input_path, output_path)

        assert exc_info.value.output_size == 100
        assert exc_info.value.status == 500
        assert not output_path.exists()

    async def test_single_use(self, paths):
        input_path, output_path = paths
        executor = TranscodeExecutor("ffmpeg", runner=FakeRunner(0, 0))
        await executor.run(software_profile(), input_path, output_path)

        with pytest.raises(RuntimeError, match="single-use"):
            await executor.run(software_profile(), input_path, output_path)
