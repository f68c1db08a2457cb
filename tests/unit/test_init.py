"""Unit tests for GeminiChat initialization and configuration."""

from unittest.mock import Mock, patch

import pytest
from dash import html
from geminichat import GeminiChat
from geminichat.engine import Synchronous
from geminichat.errors import ConfigurationError
from geminichat.layout import Bootstrap, Minimal
from geminichat.llm import Echo, Gemini
from geminichat.models import USER_SENDER, Message
from geminichat.store import InMemory
from geminichat.views import AutoScroll, Transcript


class TestGeminiChatInit:
    def test_default_initialization(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        app = GeminiChat()

        assert isinstance(app.llm, Gemini)
        assert isinstance(app.store, InMemory)
        assert isinstance(app.layout_builder, Bootstrap)
        assert isinstance(app.engine, Synchronous)
        assert app.engine.app is app

    def test_missing_api_key_fails_fast(self):
        with pytest.raises(ConfigurationError):
            GeminiChat()

    def test_custom_pillars(self):
        llm, store, layout = Echo(delay=0), InMemory(), Minimal()
        app = GeminiChat(llm=llm, store=store, layout=layout)

        assert app.llm is llm
        assert app.store is store
        assert app.layout_builder is layout

    def test_custom_engine_is_bound(self):
        engine = Synchronous()
        app = GeminiChat(llm=Echo(delay=0), engine=engine)

        assert app.engine is engine
        assert engine.app is app

    def test_layout_is_rebuilt_per_page_load(self, test_app):
        assert callable(test_app.layout)

    def test_invalid_layout_rejected(self):
        layout = Mock()
        layout.build_layout.return_value = html.Div(id="test-layout")
        layout.get_external_stylesheets.return_value = []
        layout.get_external_scripts.return_value = []

        with pytest.raises(ValueError, match="missing required component IDs"):
            GeminiChat(llm=Echo(delay=0), layout=layout)

    def test_minimal_layout_when_bootstrap_missing(self):
        with patch.dict("sys.modules", {"dash_bootstrap_components": None}):
            with pytest.warns(UserWarning, match="minimal layout"):
                app = GeminiChat(llm=Echo(delay=0))

        assert isinstance(app.layout_builder, Minimal)

    def test_bootstrap_stylesheets_added(self):
        app = GeminiChat(llm=Echo(delay=0), external_stylesheets=["custom.css"])

        assert "custom.css" in app.config.external_stylesheets
        assert len(app.config.external_stylesheets) > 1


class TestViews:
    def test_views_subscribed_once(self, test_app):
        conversation = test_app.store.get_conversation("s1")
        first = test_app.views_for(conversation)
        second = test_app.views_for(conversation)

        assert first is second
        assert isinstance(first[0], Transcript)
        assert isinstance(first[1], AutoScroll)

    def test_views_follow_conversation(self, test_app):
        conversation = test_app.store.get_conversation("s1")
        transcript, scroll = test_app.views_for(conversation)

        test_app.engine.handle_message("s1", "hello")

        assert len(transcript.children) == 2
        assert transcript.waiting is False
        assert scroll.ticks == 2

    def test_views_render_existing_messages(self, test_app):
        conversation = test_app.store.get_conversation("s1")
        conversation.append(Message(sender=USER_SENDER, text="earlier"))

        transcript, _ = test_app.views_for(conversation)
        assert len(transcript.children) == 1
