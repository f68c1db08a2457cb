"""Layout builders for the chat UI."""

import uuid
from abc import ABC, abstractmethod
from typing import List, Sequence, Set

from dash import dcc, html
from dash.development.base_component import Component as DashComponent

from .models import USER_SENDER, Message

REQUIRED_IDS = {
    "session_id",
    "pending_request",
    "scroll_trigger",
    "messages_container",
    "status_indicator",
    "input_textarea",
    "submit_button",
}

HEADING = "Gemini Chat bot"
THINKING = "Thinking..."
PLACEHOLDER = "Type your message..."


class Layout(ABC):
    """Interface for building the Dash component layout."""

    @abstractmethod
    def build_layout(self) -> DashComponent:
        """Constructs and returns the entire Dash component tree for the UI.

        Called on every page load, so each browser view gets a fresh
        ``session_id``.
        """
        pass

    @abstractmethod
    def build_messages(self, messages: Sequence[Message]) -> List[DashComponent]:
        """Converts messages into renderable Dash components."""
        pass

    def get_external_stylesheets(self) -> List:
        return []

    def get_external_scripts(self) -> List:
        return []

    def build_state(self) -> List[DashComponent]:
        """Client-side stores shared by every layout."""
        return [
            dcc.Store(id="session_id", data=str(uuid.uuid4())),
            dcc.Store(id="pending_request"),
            dcc.Store(id="scroll_trigger", data=0),
        ]


def collect_ids(component: DashComponent) -> Set[str]:
    """Returns the string ids of ``component`` and all of its descendants."""
    ids = set()
    nodes = [component]
    if hasattr(component, "_traverse"):
        nodes.extend(component._traverse())
    for node in nodes:
        node_id = getattr(node, "id", None)
        if isinstance(node_id, str):
            ids.add(node_id)
    return ids


def validate_layout(component: DashComponent) -> None:
    missing = REQUIRED_IDS - collect_ids(component)
    if missing:
        raise ValueError(
            f"Layout is missing required component IDs: {sorted(missing)}"
        )


class Minimal(Layout):
    """Plain HTML layout with no third-party component library."""

    def build_layout(self) -> DashComponent:
        return html.Div(
            [
                *self.build_state(),
                html.H3(HEADING, className="gemini-heading"),
                html.Div(
                    className="chat-container",
                    children=[
                        html.Div(
                            className="chat-box",
                            style={"height": "70vh", "overflowY": "auto"},
                            children=[
                                html.Div(id="messages_container", children=[]),
                                html.Div(
                                    html.P(THINKING),
                                    id="status_indicator",
                                    hidden=True,
                                ),
                            ],
                        ),
                        html.Div(
                            className="input-form",
                            children=[
                                dcc.Input(
                                    id="input_textarea",
                                    type="text",
                                    placeholder=PLACEHOLDER,
                                    value="",
                                ),
                                html.Button("Send", id="submit_button", n_clicks=0),
                            ],
                        ),
                    ],
                ),
            ]
        )

    def build_messages(self, messages):
        return [self.build_message(i, msg) for i, msg in enumerate(messages)]

    def build_message(self, index: int, message: Message) -> DashComponent:
        return html.Div(
            [
                html.Span(message.text),
                dcc.Clipboard(content=message.text, title="Copy to clipboard"),
            ],
            key=str(index),
            className=f"chat-message {message.sender}",
        )


class Bootstrap(Layout):
    """The default layout, built with Dash Bootstrap Components."""

    def get_external_stylesheets(self) -> List:
        import dash_bootstrap_components as dbc

        return [dbc.themes.BOOTSTRAP, dbc.icons.BOOTSTRAP]

    def build_layout(self) -> DashComponent:
        import dash_bootstrap_components as dbc

        return dbc.Container(
            className="d-flex flex-column vh-100 py-3",
            children=[
                *self.build_state(),
                html.H3(HEADING, className="gemini-heading mb-3"),
                html.Main(
                    id="chat_area",
                    className="flex-grow-1 border rounded p-3 mb-3",
                    style={"overflowY": "auto"},
                    children=[
                        html.Div(id="messages_container", children=[]),
                        html.Div(
                            html.P(THINKING, className="text-muted fst-italic"),
                            id="status_indicator",
                            hidden=True,
                        ),
                    ],
                ),
                dbc.InputGroup(
                    [
                        dbc.Input(
                            id="input_textarea",
                            type="text",
                            placeholder=PLACEHOLDER,
                            value="",
                            autoComplete="off",
                        ),
                        dbc.Button(
                            "Send", id="submit_button", color="primary", n_clicks=0
                        ),
                    ]
                ),
            ],
        )

    def build_messages(self, messages):
        return [self.build_message(i, msg) for i, msg in enumerate(messages)]

    def build_message(self, index: int, message: Message) -> DashComponent:
        style = {
            "padding": "10px",
            "borderRadius": "15px",
            "marginBottom": "10px",
            "maxWidth": "70%",
            "width": "fit-content",
            "position": "relative",
        }
        if message.sender == USER_SENDER:
            style["marginLeft"] = "auto"
            style["backgroundColor"] = "#dcf8c6"
        else:
            style["marginRight"] = "auto"
            style["backgroundColor"] = "#ffffff"
            style["border"] = "1px solid #eee"

        return html.Div(
            [
                dcc.Markdown(message.text, className="mb-0"),
                dcc.Clipboard(
                    content=message.text,
                    title="Copy to clipboard",
                    className="copy-icon text-muted small",
                ),
            ],
            key=str(index),
            className=f"chat-message {message.sender}",
            style=style,
        )
