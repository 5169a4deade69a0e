"""Gateway: HuggingFace model resolver — implements ModelResolver port."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from huggingface_hub import hf_hub_download
from pywhispercpp.constants import MODELS_DIR

from malayalam_stt.l1_entities.errors import ModelResolutionError

WHISPER_CPP_REPO = 'ggerganov/whisper.cpp'
WHISPER_CPP_MODELS = {
    'tiny': 'ggml-tiny.bin',
    'tiny-q5_1': 'ggml-tiny-q5_1.bin',
    'tiny-q8_0': 'ggml-tiny-q8_0.bin',
    'base': 'ggml-base.bin',
    'base-q5_1': 'ggml-base-q5_1.bin',
    'base-q8_0': 'ggml-base-q8_0.bin',
    'small': 'ggml-small.bin',
    'small-q5_1': 'ggml-small-q5_1.bin',
    'small-q8_0': 'ggml-small-q8_0.bin',
    'medium-q5_0': 'ggml-medium-q5_0.bin',
    'medium-q8_0': 'ggml-medium-q8_0.bin',
    'large-v3-turbo': 'ggml-large-v3-turbo.bin',
    'large-v3-turbo-q5_0': 'ggml-large-v3-turbo-q5_0.bin',
    'large-v3-turbo-q8_0': 'ggml-large-v3-turbo-q8_0.bin',
}


class PercentReporter:
    """Stand-in for tqdm that turns byte counts into whole percentages.

    hf_hub_download instantiates the class itself, so the callback is bound
    by subclassing (see ``bind``) rather than passed to ``__init__``.
    """

    callback: Callable[[int], None] = staticmethod(lambda percent: None)

    def __init__(self, *args, total: int | None = None, **kwargs) -> None:
        self.total = total or 0
        self.n = 0
        self._emit()

    @classmethod
    def bind(cls, callback: Callable[[int], None]) -> type[PercentReporter]:
        return type('BoundPercentReporter', (cls,), {'callback': staticmethod(callback)})

    def _emit(self) -> None:
        if self.total > 0:
            self.callback(min(self.n * 100 // self.total, 100))

    def update(self, n: int = 1) -> None:
        self.n += n
        self._emit()

    def close(self) -> None:
        pass

    def set_description(self, *args, **kwargs) -> None:
        pass

    set_description_str = set_description

    def refresh(self, *args, **kwargs) -> None:
        pass

    def __enter__(self) -> PercentReporter:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class HfModelResolver:
    """Maps a model name to a local ggml file, fetching it from the whisper.cpp HF repo on first use.

    Absolute paths are used as-is; names outside the known table pass straight
    through to pywhispercpp.
    """

    def __init__(self, cache_dir: Path | None = None, on_progress: Callable[[int], None] | None = None) -> None:
        self._cache_dir = cache_dir
        self._on_progress = on_progress

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir or Path(MODELS_DIR) / 'whisper-cpp'

    def resolve(self, model_name: str, on_progress: Callable[[int], None] | None = None) -> str:
        if Path(model_name).is_absolute():
            if not Path(model_name).exists():
                raise ModelResolutionError(f'Model file not found: {model_name}')
            return model_name

        filename = WHISPER_CPP_MODELS.get(model_name)
        if filename is None:
            return model_name

        cached = self.cache_dir / filename
        if cached.exists():
            return str(cached)

        callback = on_progress or self._on_progress
        kwargs: dict = {'repo_id': WHISPER_CPP_REPO, 'filename': filename, 'local_dir': self.cache_dir}
        if callback is not None:
            kwargs['tqdm_class'] = PercentReporter.bind(callback)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            return hf_hub_download(**kwargs)
        except OSError as e:
            raise ModelResolutionError(f'Failed to fetch model {model_name!r}: {e}') from e
