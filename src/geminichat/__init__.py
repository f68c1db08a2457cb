"""
The main entrypoint for the geminichat package.

This module contains the ``GeminiChat`` Dash app, which wires together the
injectable pillars: layout, llm, store and engine.
"""

import weakref
from typing import Optional, Tuple

from dash import Dash

from . import engine, layout, llm, store
from .config import get_settings
from .views import AutoScroll, Transcript


class GeminiChat(Dash):
    """
    A browser chat UI that forwards user text to Gemini.

    Each browser view gets its own in-memory conversation. The constructor
    uses concrete default implementations, any of which can be replaced.
    """

    def __init__(
        self,
        layout: Optional["layout.Layout"] = None,
        llm: Optional["llm.LLM"] = None,
        store: Optional["store.Store"] = None,
        engine: Optional["engine.Engine"] = None,
        **kwargs,
    ) -> None:
        """
        Initialize the app with configurable pillars.

        Parameters
        ----------
        layout : layout.Layout, optional
            Layout builder for constructing the Dash component tree.
            Defaults to layout.Bootstrap(), or layout.Minimal() when
            dash-bootstrap-components is not installed.
        llm : llm.LLM, optional
            Provider that turns the conversation into a reply.
            Defaults to llm.Gemini(), configured from GEMINI_* settings.
        store : store.Store, optional
            Registry of per-view conversations. Defaults to store.InMemory().
        engine : engine.Engine, optional
            Controller for a chat turn. Defaults to engine.Synchronous().
        **kwargs
            Additional arguments passed to the Dash constructor.

        Raises
        ------
        ConfigurationError
            If no llm is given and no Gemini API key is configured.
        ValueError
            If the layout is missing component IDs the callbacks need.

        Examples
        --------
        >>> app = GeminiChat(llm=llm.Gemini(api_key="your-key"))
        >>> app.run(debug=True)
        """
        layout_module = globals()["layout"]
        llm_module = globals()["llm"]
        store_module = globals()["store"]
        engine_module = globals()["engine"]

        if layout:
            self.layout_builder = layout
        else:
            try:
                import dash_bootstrap_components  # noqa: F401

                self.layout_builder = layout_module.Bootstrap()
            except ImportError:
                import warnings

                warnings.warn(
                    "geminichat is running with a minimal layout because "
                    "'dash-bootstrap-components' is not installed.",
                    UserWarning,
                )
                self.layout_builder = layout_module.Minimal()

        self.llm = llm if llm is not None else llm_module.Gemini()

        if "external_stylesheets" not in kwargs:
            kwargs["external_stylesheets"] = []
        kwargs["external_stylesheets"].extend(
            self.layout_builder.get_external_stylesheets()
        )

        if "external_scripts" not in kwargs:
            kwargs["external_scripts"] = []
        kwargs["external_scripts"].extend(self.layout_builder.get_external_scripts())

        super().__init__(**kwargs)

        self.store = (
            store
            if store is not None
            else store_module.InMemory(max_sessions=get_settings().max_sessions)
        )
        self.engine = engine if engine is not None else engine_module.Synchronous()
        self.engine.app = self

        self._views = weakref.WeakKeyDictionary()

        layout_module.validate_layout(self.layout_builder.build_layout())
        # A callable layout is rebuilt on each page load: one session per view.
        self.layout = self.layout_builder.build_layout
        self._register_callbacks()

    def views_for(
        self, conversation: "store.ConversationStore"
    ) -> Tuple[Transcript, AutoScroll]:
        """Returns the transcript and auto-scroll observers of a conversation.

        They are subscribed the first time a conversation is seen.
        """
        views = self._views.get(conversation)
        if views is None:
            transcript = Transcript(self.layout_builder.build_messages)
            transcript.children = transcript.render(conversation.messages)
            transcript.waiting = conversation.awaiting_reply
            scroll = AutoScroll()
            conversation.subscribe(transcript)
            conversation.subscribe(scroll)
            views = self._views[conversation] = (transcript, scroll)
        return views

    def _register_callbacks(self) -> None:
        """Registers all the callbacks that orchestrate the pillars."""
        from .callbacks import register_callbacks

        register_callbacks(self)
