"""
Pytest Configuration for Monitor Tests
"""
import pytest

from examwatch.monitor.adapters import SignalHub
from examwatch.monitor.baseline import BaselineManager, InMemoryBaselineStore
from examwatch.monitor.evaluation import FrameEvaluator
from examwatch.monitor.scheduler import SessionScheduler
from examwatch.monitor.scoring import AlertPrioritizer
from examwatch.monitor.session import MonitorSession

from factories import FakeAdapter, FakeFrameSource


@pytest.fixture
def store():
    return InMemoryBaselineStore()


@pytest.fixture
def session():
    return MonitorSession()


@pytest.fixture
def baseline(session, store):
    return BaselineManager(session, store)


@pytest.fixture
def evaluator(baseline):
    return FrameEvaluator(baseline, prioritizer=AlertPrioritizer(), settle_delay=0)


@pytest.fixture
def make_hub():
    """Build a hub from canned pose/face/object results; `failing` adapters never load"""
    def _make(poses=None, faces=None, objects=None, failing=()):
        def adapter(name, results):
            load_error = FileNotFoundError(f"{name} weights") if name in failing else None
            return FakeAdapter(name, results, load_error=load_error)

        return SignalHub(
            pose=adapter("pose", poses),
            face=adapter("face", faces),
            objects=adapter("objects", objects)
        )
    return _make


@pytest.fixture
def make_scheduler(make_hub):
    """
    Build a fully wired scheduler over fake adapters.

    The returned scheduler exposes its hub, source and baseline store for
    assertions.
    """
    def _make(poses=None, faces=None, objects=None, source=None, tick_interval=0.01, failing=(), session_id=None):
        session = MonitorSession(id=session_id) if session_id else MonitorSession()
        store = InMemoryBaselineStore()
        manager = BaselineManager(session, store)
        evaluator = FrameEvaluator(manager, settle_delay=0)
        hub = make_hub(poses, faces, objects, failing)
        return SessionScheduler(
            hub,
            source or FakeFrameSource(),
            manager,
            evaluator,
            tick_interval=tick_interval
        )
    return _make
