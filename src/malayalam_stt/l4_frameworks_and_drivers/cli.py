"""CLI entry point for malayalam-stt."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from malayalam_stt import __version__


@click.command()
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True),
    help='Path to YAML config file.',
)
@click.option(
    '-l',
    '--language',
    default=None,
    help='Transcription language tag (ml, en, hi). Defaults to the config value.',
)
@click.option(
    '-d',
    '--device',
    default=None,
    help='Input device index or name (see --list-devices).',
)
@click.option(
    '--list-devices',
    is_flag=True,
    default=False,
    help='List audio input devices and exit.',
)
@click.option(
    '-f',
    '--audio-file',
    'audio_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Transcribe an audio file, print the text and exit (no TUI).',
)
@click.version_option(version=__version__)
def cli(config_path, language, device, list_devices, audio_file):
    """malayalam-stt -- record or upload speech and get a Malayalam transcript."""
    from malayalam_stt.l1_entities.language import (  # noqa: PLC0415 -- deferred: not needed for --help
        SUPPORTED_LANGUAGES,
        find_language,
    )
    from malayalam_stt.l2_use_cases.ports.config_loader import ConfigLoader  # noqa: PLC0415 -- deferred: not needed for --help
    from malayalam_stt.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlConfigLoader,
    )
    from malayalam_stt.l4_frameworks_and_drivers.config import (  # noqa: PLC0415 -- deferred: not needed for --help
        build_app_config,
    )

    if list_devices:
        _print_devices()
        return

    if language is not None and find_language(language) is None:
        supported = ', '.join(lang.code for lang in SUPPORTED_LANGUAGES)
        click.echo(f'Error: unsupported language {language!r} (choose from {supported})', err=True)
        sys.exit(2)

    try:
        overrides: dict = {}
        if language:
            overrides['transcription'] = {'language': find_language(language).code}
        if device is not None:
            overrides['capture'] = {'device': device}
        config_loader: ConfigLoader = YamlConfigLoader()
        raw = config_loader.load_raw(config_path, overrides=overrides or None)
        config = build_app_config(raw)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    from malayalam_stt.l3_interface_adapters.gateways.paths import LOG_DIR  # noqa: PLC0415 -- deferred: platformdirs not loaded on --help
    from malayalam_stt.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: not needed for --help
        setup_file_logging,
    )

    setup_file_logging(LOG_DIR)
    _preflight_ffmpeg()

    if audio_file:
        from malayalam_stt.l4_frameworks_and_drivers.batch_runner import (  # noqa: PLC0415 -- deferred: batch mode only, not loaded for TUI path
            run_batch,
        )

        run_batch(audio_path=Path(audio_file), config=config)
        return

    _preflight_microphone()

    from malayalam_stt.l4_frameworks_and_drivers.apps.speech import (  # noqa: PLC0415 -- deferred: Textual TUI not loaded for --help or batch mode
        SpeechApp,
    )
    from malayalam_stt.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: Textual TUI not loaded for --help or batch mode
        DependencyContainer,
    )

    # Start the multiprocessing resource tracker while sys.stderr is still a
    # real fd; Textual swaps it for a stream whose fileno() is -1, which breaks
    # spawning the tracker later from the subprocess transcriber.
    try:
        import multiprocessing.resource_tracker as _rt  # noqa: PLC0415 -- pre-init before Textual

        _rt.ensure_running()
    except Exception:  # noqa: S110 -- best-effort; tracker may not exist on all platforms
        pass

    container = DependencyContainer(config)
    app = SpeechApp(config=config, controller=container.controller)
    try:
        app.run()
    finally:
        container.close()


def _print_devices() -> None:
    from malayalam_stt.l1_entities.errors import DeviceUnavailableError  # noqa: PLC0415 -- deferred: device listing only
    from malayalam_stt.l3_interface_adapters.gateways.sounddevice_audio_capture import (  # noqa: PLC0415 -- deferred: PortAudio not loaded on --help
        SounddeviceAudioCapture,
    )

    try:
        devices = SounddeviceAudioCapture().list_devices()
    except DeviceUnavailableError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)
    if not devices:
        click.echo('No input audio devices found.')
        return
    for dev in devices:
        marker = '*' if dev.is_default else ' '
        click.echo(f'{marker} {dev.index:>3}  {dev.name}')


def _preflight_ffmpeg() -> None:
    from malayalam_stt.l3_interface_adapters.gateways.ffmpeg_audio_decoder import (  # noqa: PLC0415 -- deferred: preflight only
        ffmpeg_available,
    )

    if not ffmpeg_available():
        click.echo('Warning: ffmpeg not found on PATH. Decoding recordings and uploads will fail.', err=True)


def _preflight_microphone() -> None:
    from malayalam_stt.l1_entities.errors import DeviceUnavailableError  # noqa: PLC0415 -- deferred: preflight only
    from malayalam_stt.l3_interface_adapters.gateways.sounddevice_audio_capture import (  # noqa: PLC0415 -- deferred: PortAudio not loaded on --help
        SounddeviceAudioCapture,
    )

    try:
        found = SounddeviceAudioCapture().list_devices()
    except DeviceUnavailableError as e:
        click.echo(f'Warning: microphone unavailable ({e}). Uploads still work.', err=True)
        return
    if not found:
        click.echo('Warning: no microphone detected. Uploads still work.', err=True)
