import pytest

from quizgen.api.v1.schemas import QuizResult
from quizgen.core.sse_channel import ChannelClosedError, SSEChannel
from quizgen.services.progress_emitter import ProgressEmitter, ProgressEvent, ProgressStage


@pytest.mark.asyncio
async def test_emit_notifies_listeners_in_order():
    received = []

    async def listener(event):
        received.append(event)

    emitter = ProgressEmitter([listener])
    await emitter.emit(ProgressStage.INITIALIZING, 5)
    await emitter.emit("Custom stage", 10, extra=2)

    assert received == [
        ProgressEvent("Initializing", 5),
        ProgressEvent("Custom stage", 10, 2),
    ]


@pytest.mark.asyncio
async def test_percentage_never_decreases():
    emitter = ProgressEmitter()

    await emitter.emit(ProgressStage.STREAMING, 60)
    event = await emitter.emit(ProgressStage.FALLBACK, 30)

    assert event.percentage == 60
    assert event.stage == "Generating from AI (non-streaming fallback)"
    assert emitter.last_percentage == 60


@pytest.mark.asyncio
@pytest.mark.parametrize("percentage,expected", [(-5, 0), (150, 100), (42, 42)])
async def test_percentage_is_clamped(percentage, expected):
    event = await ProgressEmitter().emit(ProgressStage.GENERATING, percentage)
    assert event.percentage == expected


@pytest.mark.asyncio
async def test_failing_listener_does_not_stop_emission():
    received = []

    async def broken(event):
        raise ChannelClosedError("gone")

    async def healthy(event):
        received.append(event.percentage)

    emitter = ProgressEmitter([broken])
    emitter.subscribe(healthy)

    await emitter.emit(ProgressStage.INITIALIZING, 5)
    await emitter.emit(ProgressStage.FINALIZING, 95)

    assert received == [5, 95]


def make_quiz():
    return QuizResult(
        title="T",
        topic="T",
        difficulty="Easy",
        questions=[],
        created_at=1,
        total_questions=0,
        total_marks=1,
        exam_style="Standard / Generic",
    )


async def collect(channel):
    return [frame async for frame in channel.frames()]


@pytest.mark.asyncio
async def test_channel_frames_progress_then_complete():
    channel = SSEChannel()
    emitter = ProgressEmitter([channel.on_progress])

    await emitter.emit(ProgressStage.FORMATTING, 75, extra=1)
    channel.complete(make_quiz())
    frames = await collect(channel)

    assert frames[0] == 'data: {"type":"progress","stage":"Formatting & validating","percentage":75,"questionsGenerated":1}\n\n'
    assert frames[1].startswith('data: {"type":"complete","data":{"title":"T"')
    assert len(frames) == 2


@pytest.mark.asyncio
async def test_channel_accepts_exactly_one_terminal_frame():
    channel = SSEChannel()

    channel.fail("boom")
    channel.complete(make_quiz())
    frames = await collect(channel)

    assert frames == ['data: {"type":"error","message":"boom"}\n\n']


@pytest.mark.asyncio
async def test_closed_channel_rejects_progress():
    channel = SSEChannel()
    channel.fail("done")
    await collect(channel)

    assert channel.closed
    with pytest.raises(ChannelClosedError):
        await channel.on_progress(ProgressEvent("Finalizing", 95))
