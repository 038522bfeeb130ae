import pytest
import yaml
from pathlib import Path
from typing import Callable, Dict, List, Optional
from avb.config.models import AppConfig
from avb.infrastructure.event_bus import EventBus
from avb.infrastructure.process import ToolResult

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config(tmp_path):
    """Returns an AppConfig whose directories live under tmp_path."""
    return AppConfig(
        save_dir=tmp_path / "save",
        tmp_dir=tmp_path / "tmp",
        min_crf=15,
        max_crf=50,
        max_encoded_percent=70,
        keep_original=True,
        move_failed_files=False,
        delete_almost_same_files=False,
    )

@pytest.fixture
def config_yaml_path(tmp_path):
    """Creates a temporary YAML config file."""
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf_file = conf_dir / "config.yaml"

    content = {
        'save_dir': str(tmp_path / "save"),
        'tmp_dir': str(tmp_path / "tmp"),
        'min_crf': 20,
        'max_crf': 40,
        'max_encoded_percent': 80,
        'keep_original': False,
        'move_failed_files': True,
        'delete_almost_same_files': True,
        'renamer': {
            'command': 'shorten-name',
            'args': ['--max', '100'],
            'bytes_limit': 255,
            'chars_limit': 100,
        },
    }

    with open(conf_file, 'w') as f:
        yaml.dump(content, f)

    return conf_file

# ============================================================================
# EventBus Fixtures
# ============================================================================

@pytest.fixture
def event_bus():
    """Returns a fresh EventBus instance."""
    return EventBus()

@pytest.fixture
def recorded_events(event_bus):
    """Collects every published event, in order."""
    events = []
    original_publish = event_bus.publish

    def _publish(event):
        events.append(event)
        original_publish(event)

    event_bus.publish = _publish
    return events

# ============================================================================
# External tool fakes
# ============================================================================

class FakeToolRunner:
    """Stands in for ToolRunner; answers by executable name.

    Handlers receive the argument list and the env overrides and return a
    ToolResult (or raise OSError to simulate a missing binary).
    """

    def __init__(self, handlers: Optional[Dict[str, Callable[[List[str], dict], ToolResult]]] = None):
        self.handlers = handlers or {}
        self.calls: List[List[str]] = []
        self.envs: List[dict] = []

    def run(self, args, env=None, capture=True):
        cmd = [str(a) for a in args]
        self.calls.append(cmd)
        self.envs.append(env or {})
        handler = self.handlers.get(cmd[0])
        if handler is None:
            raise OSError(2, f"No such file or directory: '{cmd[0]}'")
        return handler(cmd, env or {})

    def calls_for(self, executable: str) -> List[List[str]]:
        return [c for c in self.calls if c[0] == executable]


@pytest.fixture
def fake_runner():
    return FakeToolRunner()


class FakeMediaTools:
    """Emulates ffprobe and ab-av1 on top of plain files.

    A file counts as a video when it starts with b"VIDEO"; its duration is
    read from ``durations`` (default 60.0). ab-av1 copies the input to the
    output, or fails with ``encoder_exit`` when set.
    """

    def __init__(self):
        self.durations: Dict[Path, float] = {}
        self.encoder_exit = 0
        self.encoder_writes_partial = True

    @staticmethod
    def _is_video(path: Path) -> bool:
        try:
            return path.read_bytes().startswith(b"VIDEO")
        except OSError:
            return False

    def ffprobe(self, cmd: List[str], env: dict) -> ToolResult:
        path = Path(cmd[-1])
        if "format=duration" in cmd:
            return ToolResult(returncode=0, stdout=f"{self.durations.get(path, 60.0)}\n")
        if not self._is_video(path):
            return ToolResult(returncode=1, stderr="Invalid data found when processing input")
        return ToolResult(returncode=0, stdout="1920,1080\n")

    def ab_av1(self, cmd: List[str], env: dict) -> ToolResult:
        input_path = Path(cmd[cmd.index("-i") + 1])
        output_path = Path(cmd[cmd.index("-o") + 1])
        if self.encoder_exit != 0:
            if self.encoder_writes_partial:
                output_path.write_bytes(b"trunc")
            return ToolResult(returncode=self.encoder_exit)
        output_path.write_bytes(input_path.read_bytes())
        return ToolResult(returncode=0)

    def runner(self) -> FakeToolRunner:
        return FakeToolRunner({"ffprobe": self.ffprobe, "ab-av1": self.ab_av1})


@pytest.fixture
def media_tools():
    return FakeMediaTools()

# ============================================================================
# File System Fixtures
# ============================================================================

@pytest.fixture
def test_input_dir(tmp_path):
    """Creates a test input directory."""
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    return input_dir

@pytest.fixture
def dummy_video_files(test_input_dir):
    """Creates fake video files (b"VIDEO" header) in the input directory."""
    files = []

    for i in range(3):
        f = test_input_dir / f"video{i}.mp4"
        f.write_bytes(b"VIDEO dummy content " * 100)
        files.append(f)

    subdir = test_input_dir / "subdir"
    subdir.mkdir()
    f = subdir / "sub.video.mkv"
    f.write_bytes(b"VIDEO dummy content " * 100)
    files.append(f)

    return files


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
