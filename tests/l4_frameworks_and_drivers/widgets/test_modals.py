"""Tests for the modal screens: upload, edit, download progress and help."""

from __future__ import annotations

from pathlib import Path

import pytest
from textual.app import App, ComposeResult
from textual.widgets import Input, ProgressBar, Static, TextArea

from malayalam_stt.l4_frameworks_and_drivers.widgets.download_modal import DownloadModal
from malayalam_stt.l4_frameworks_and_drivers.widgets.edit_modal import EditModal
from malayalam_stt.l4_frameworks_and_drivers.widgets.help_modal import HelpModal, build_help_markdown
from malayalam_stt.l4_frameworks_and_drivers.widgets.upload_modal import UploadModal


class ModalHost(App[None]):
    """Minimal app that records what each modal returns."""

    def __init__(self):
        super().__init__()
        self.results: list = []

    def compose(self) -> ComposeResult:
        yield Static('host')

    def open(self, modal) -> None:
        self.push_screen(modal, callback=self.results.append)


class TestUploadModal:
    @pytest.mark.asyncio
    async def test_submit_returns_expanded_path(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            app.open(UploadModal())
            await pilot.pause()
            app.screen.query_one('#upload-input', Input).value = '~/clips/talk.ogg'
            await pilot.press('enter')
            await pilot.pause()
            assert app.results == [Path('~/clips/talk.ogg').expanduser()]

    @pytest.mark.asyncio
    async def test_blank_submit_is_cancel(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            app.open(UploadModal())
            await pilot.pause()
            await pilot.press('enter')
            await pilot.pause()
            assert app.results == [None]

    @pytest.mark.asyncio
    async def test_escape_cancels(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            app.open(UploadModal(initial='/tmp/a.wav'))
            await pilot.pause()
            await pilot.press('escape')
            await pilot.pause()
            assert app.results == [None]


class TestEditModal:
    @pytest.mark.asyncio
    async def test_prefilled_and_saved(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            app.open(EditModal('പഴയത്'))
            await pilot.pause()
            area = app.screen.query_one('#edit-input', TextArea)
            assert area.text == 'പഴയത്'
            area.load_text('പുതിയത്')
            await pilot.press('ctrl+s')
            await pilot.pause()
            assert app.results == ['പുതിയത്']

    @pytest.mark.asyncio
    async def test_escape_cancels(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            app.open(EditModal('x'))
            await pilot.pause()
            await pilot.press('escape')
            await pilot.pause()
            assert app.results == [None]


class TestDownloadModal:
    @pytest.mark.asyncio
    async def test_initial_percent_shown(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            modal = DownloadModal(model_name='small', percent=25)
            app.open(modal)
            await pilot.pause()
            assert modal.query_one('#dl-bar', ProgressBar).progress == 25
            assert '25%' in str(modal.query_one('#dl-status', Static).content)
            assert 'small' in str(modal.query_one('#dl-detail', Static).content)

    @pytest.mark.asyncio
    async def test_update_progress(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            modal = DownloadModal(model_name='small')
            app.open(modal)
            await pilot.pause()
            modal.update_progress(64)
            assert modal.percent == 64
            assert modal.query_one('#dl-bar', ProgressBar).progress == 64

    def test_update_before_mount_is_kept(self):
        modal = DownloadModal(model_name='small')
        modal.update_progress(10)
        assert modal.percent == 10

    @pytest.mark.asyncio
    async def test_escape_hides(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            app.open(DownloadModal(model_name='small'))
            await pilot.pause()
            await pilot.press('escape')
            await pilot.pause()
            assert not isinstance(app.screen, DownloadModal)


class TestHelpModal:
    def test_markdown_lists_keys_and_language(self):
        md = build_help_markdown([('r', 'Record'), ('q', 'Quit')], 'Malayalam')
        assert '**Language:** Malayalam' in md
        assert '| `r` | Record |' in md
        assert '| `q` | Quit |' in md
        assert 'history N/M' in md

    @pytest.mark.asyncio
    async def test_escape_closes(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            app.open(HelpModal([('r', 'Record')], 'English'))
            await pilot.pause()
            assert isinstance(app.screen, HelpModal)
            await pilot.press('escape')
            await pilot.pause()
            assert not isinstance(app.screen, HelpModal)
