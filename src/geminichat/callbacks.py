"""Callbacks wiring the browser view to the engine."""

import logging

from dash import Input, Output, State, no_update

logger = logging.getLogger(__name__)

SEND_LABEL = "Send"
BUSY_LABEL = "..."


def register_callbacks(app):
    @app.callback(
        [
            Output("messages_container", "children"),
            Output("input_textarea", "value"),
            Output("submit_button", "disabled"),
            Output("submit_button", "children"),
            Output("status_indicator", "hidden"),
            Output("scroll_trigger", "data"),
            Output("pending_request", "data"),
        ],
        [
            Input("submit_button", "n_clicks"),
            Input("input_textarea", "n_submit"),
        ],
        [
            State("input_textarea", "value"),
            State("session_id", "data"),
        ],
        prevent_initial_call=True,
    )
    def send_message(n_clicks, n_submit, user_input, session_id):
        if not session_id:
            return (no_update,) * 7

        conversation = app.store.get_conversation(session_id)
        transcript, scroll = app.views_for(conversation)
        if app.engine.submit(session_id, user_input) is None:
            return (no_update,) * 7

        return (
            transcript.children,
            "",
            transcript.waiting,
            BUSY_LABEL if transcript.waiting else SEND_LABEL,
            not transcript.waiting,
            scroll.ticks,
            {"session_id": session_id, "turn": len(conversation)},
        )

    @app.callback(
        [
            Output("messages_container", "children", allow_duplicate=True),
            Output("submit_button", "disabled", allow_duplicate=True),
            Output("submit_button", "children", allow_duplicate=True),
            Output("status_indicator", "hidden", allow_duplicate=True),
            Output("scroll_trigger", "data", allow_duplicate=True),
        ],
        [Input("pending_request", "data")],
        [State("session_id", "data")],
        prevent_initial_call=True,
    )
    def fetch_reply(pending, session_id):
        if not pending or pending.get("session_id") != session_id:
            return (no_update,) * 5

        conversation = app.store.get_conversation(session_id)
        transcript, scroll = app.views_for(conversation)
        try:
            app.engine.resolve(session_id)
        except Exception:
            logger.exception("Failed to resolve reply for session %s", session_id)

        return (
            transcript.children,
            transcript.waiting,
            BUSY_LABEL if transcript.waiting else SEND_LABEL,
            not transcript.waiting,
            scroll.ticks,
        )

    _register_clientside_callbacks(app)


def _register_clientside_callbacks(app):
    # Auto-scroll to bottom
    app.clientside_callback(
        """
        function(ticks) {
            setTimeout(function() {
                const messagesContainer = document.getElementById('messages_container');
                if (messagesContainer && messagesContainer.parentElement) {
                    const box = messagesContainer.parentElement;
                    box.scrollTo({top: box.scrollHeight, behavior: 'smooth'});
                }
            }, 100);
            return window.dash_clientside.no_update;
        }
        """,
        Output("messages_container", "data-scroll-trigger", allow_duplicate=True),
        [Input("scroll_trigger", "data")],
        prevent_initial_call=True,
    )

    # Focus input after sending
    app.clientside_callback(
        """
        function(input_value) {
            if (input_value === "") {
                setTimeout(() => {
                    const input = document.getElementById('input_textarea');
                    if (input) {
                        input.focus();
                    }
                }, 100);
            }
            return window.dash_clientside.no_update;
        }
        """,
        Output("input_textarea", "style", allow_duplicate=True),
        [Input("input_textarea", "value")],
        prevent_initial_call=True,
    )
