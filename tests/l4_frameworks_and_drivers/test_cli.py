"""Tests for CLI entry point — patches deferred imports at source module level."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from malayalam_stt import __version__
from malayalam_stt.l1_entities.errors import DeviceUnavailableError
from malayalam_stt.l2_use_cases.ports.audio_capture import InputDevice
from malayalam_stt.l4_frameworks_and_drivers.cli import (
    _preflight_ffmpeg,  # noqa: PLC2701 -- testing private helper
    _preflight_microphone,  # noqa: PLC2701 -- testing private helper
    cli,
)

# cli() uses deferred `from X import Y`, so patches target the source modules.
_YAML_CFG = 'malayalam_stt.l3_interface_adapters.gateways.yaml_config_loader.YamlConfigLoader'
_LOGGING = 'malayalam_stt.l4_frameworks_and_drivers.logging_setup.setup_file_logging'
_BATCH = 'malayalam_stt.l4_frameworks_and_drivers.batch_runner.run_batch'
_APP = 'malayalam_stt.l4_frameworks_and_drivers.apps.speech.SpeechApp'
_CONTAINER = 'malayalam_stt.l4_frameworks_and_drivers.container.DependencyContainer'
_CAPTURE = 'malayalam_stt.l3_interface_adapters.gateways.sounddevice_audio_capture.SounddeviceAudioCapture'
_CLI = 'malayalam_stt.l4_frameworks_and_drivers.cli'


@pytest.fixture
def env():
    """Patch everything the TUI path touches; yields the mocks by name."""
    with (
        patch(_YAML_CFG) as loader_cls,
        patch(_LOGGING) as setup_logging,
        patch(f'{_CLI}._preflight_ffmpeg') as ffmpeg,
        patch(f'{_CLI}._preflight_microphone') as microphone,
        patch('multiprocessing.resource_tracker.ensure_running'),
        patch(_APP) as app_cls,
        patch(_CONTAINER) as container_cls,
        patch(_BATCH) as run_batch,
    ):
        loader_cls.return_value.load_raw.return_value = {}
        yield {
            'loader': loader_cls.return_value,
            'setup_logging': setup_logging,
            'ffmpeg': ffmpeg,
            'microphone': microphone,
            'app_cls': app_cls,
            'container_cls': container_cls,
            'run_batch': run_batch,
        }


class TestCli:
    def test_version_flag(self):
        result = CliRunner().invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_tui_run(self, env):
        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0, result.output
        env['setup_logging'].assert_called_once()
        env['ffmpeg'].assert_called_once()
        env['microphone'].assert_called_once()
        config = env['container_cls'].call_args.args[0]
        assert config.transcription.language == 'ml'
        env['app_cls'].return_value.run.assert_called_once()
        env['container_cls'].return_value.close.assert_called_once()
        env['run_batch'].assert_not_called()

    def test_container_closed_when_app_crashes(self, env):
        env['app_cls'].return_value.run.side_effect = RuntimeError('boom')
        result = CliRunner().invoke(cli, [])
        assert result.exit_code != 0
        env['container_cls'].return_value.close.assert_called_once()

    def test_language_and_device_become_overrides(self, env):
        CliRunner().invoke(cli, ['-l', 'EN', '-d', '3'])
        overrides = env['loader'].load_raw.call_args.kwargs['overrides']
        assert overrides == {'transcription': {'language': 'en'}, 'capture': {'device': '3'}}

    def test_unsupported_language_exits_2(self, env):
        result = CliRunner().invoke(cli, ['-l', 'fr'])
        assert result.exit_code == 2
        assert 'unsupported language' in result.output
        env['loader'].load_raw.assert_not_called()

    def test_config_file_not_found_exits_1(self, env):
        env['loader'].load_raw.side_effect = FileNotFoundError('Config file not found: x.yaml')
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 1
        assert 'Config file not found' in result.output
        env['app_cls'].assert_not_called()

    def test_invalid_config_exits_1(self, env):
        env['loader'].load_raw.return_value = {'history': {'max_entries': -1}}
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 1
        env['container_cls'].assert_not_called()

    def test_config_path_forwarded(self, env, sample_config_yaml: Path):
        CliRunner().invoke(cli, ['-c', str(sample_config_yaml)])
        assert env['loader'].load_raw.call_args.args[0] == str(sample_config_yaml)

    def test_audio_file_runs_batch(self, env, tmp_path: Path):
        audio = tmp_path / 'clip.wav'
        audio.write_bytes(b'RIFF')

        result = CliRunner().invoke(cli, ['-f', str(audio)])

        assert result.exit_code == 0, result.output
        kwargs = env['run_batch'].call_args.kwargs
        assert kwargs['audio_path'] == audio
        env['microphone'].assert_not_called()
        env['app_cls'].assert_not_called()

    def test_list_devices(self):
        devices = [InputDevice(index=0, name='Built-in Mic', is_default=True), InputDevice(index=4, name='USB Mic')]
        with patch(_CAPTURE) as capture_cls:
            capture_cls.return_value.list_devices.return_value = devices
            result = CliRunner().invoke(cli, ['--list-devices'])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith('*')
        assert 'Built-in Mic' in lines[0]
        assert lines[1].startswith(' ')
        assert 'USB Mic' in lines[1]


class TestPreflight:
    def test_ffmpeg_missing_warns(self, capsys):
        with patch(
            'malayalam_stt.l3_interface_adapters.gateways.ffmpeg_audio_decoder.ffmpeg_available', return_value=False
        ):
            _preflight_ffmpeg()
        assert 'ffmpeg not found' in capsys.readouterr().err

    def test_ffmpeg_present_is_quiet(self, capsys):
        with patch(
            'malayalam_stt.l3_interface_adapters.gateways.ffmpeg_audio_decoder.ffmpeg_available', return_value=True
        ):
            _preflight_ffmpeg()
        assert capsys.readouterr().err == ''

    def test_no_input_devices_warns(self, capsys):
        with patch(_CAPTURE) as capture_cls:
            capture_cls.return_value.list_devices.return_value = []
            _preflight_microphone()
        assert 'no microphone detected' in capsys.readouterr().err

    def test_query_failure_warns(self, capsys):
        with patch(_CAPTURE) as capture_cls:
            capture_cls.return_value.list_devices.side_effect = DeviceUnavailableError('PortAudio missing')
            _preflight_microphone()
        assert 'microphone unavailable (PortAudio missing)' in capsys.readouterr().err

    def test_device_present_is_quiet(self, capsys):
        with patch(_CAPTURE) as capture_cls:
            capture_cls.return_value.list_devices.return_value = [InputDevice(index=0, name='Mic', is_default=True)]
            _preflight_microphone()
        assert capsys.readouterr().err == ''
