"""
Streamlit building blocks shared by the pages in streamlit_app.py.

Renders resource cards, the drill-down breadcrumb and entity grids, and the
per-degree comment section. All state changes go through Navigator /
CommentBoard callbacks so they are applied before Streamlit reruns the
script.
"""

from collections.abc import Callable, Sequence
from typing import Any

import streamlit as st

from catalog.comments import CommentBoard, Notice
from catalog.config import API_URL
from catalog.models import Resource
from catalog.navigation import Navigator, View

GRID_COLUMNS = 3
DEFAULT_DESCRIPTION = "Comprehensive study material for exam preparation"


def show_notice(notice: Notice | None) -> None:
    if notice is None:
        return
    icon = "⚠️" if notice.is_error else "✅"
    st.toast(f"**{notice.title}**: {notice.description}", icon=icon)


def download_url(resource: Resource) -> str:
    return f"{API_URL}/resources/{resource.id}/download"


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

def resource_card(resource: Resource) -> None:
    with st.container(border=True):
        st.markdown(f"**{resource.title or '(untitled)'}**")
        meta = " • ".join(str(x) for x in (resource.course, resource.year) if x)
        if meta:
            st.caption(meta)
        if resource.type_label:
            st.markdown(f"`{resource.type_label}`")
        st.write(resource.description or DEFAULT_DESCRIPTION)

        left, right = st.columns([2, 1])
        left.caption(f"⬇ {resource.download_count} downloads")
        if resource.file_path:
            right.link_button("Download", download_url(resource))


def resource_grid(resources: Sequence[Resource], empty_message: str) -> None:
    if not resources:
        st.info(empty_message)
        return
    cols = st.columns(GRID_COLUMNS)
    for i, resource in enumerate(resources):
        with cols[i % GRID_COLUMNS]:
            resource_card(resource)


# ---------------------------------------------------------------------------
# Drill-down
# ---------------------------------------------------------------------------

def breadcrumb(nav: Navigator) -> None:
    trail = nav.trail()
    if not trail:
        return
    cols = st.columns(len(trail))
    for col, (view, label) in zip(cols, trail):
        if view is nav.view:
            col.markdown(f"**{label}**")
        else:
            col.button(label, key=f"crumb-{view.name}", on_click=nav.back_to, args=(view,))


def back_button(nav: Navigator, label: str) -> None:
    st.button(f"← {label}", key=f"back-{nav.view.name}", on_click=nav.back)


def entity_grid(
    items: Sequence[Any],
    title: Callable[[Any], str],
    subtitle: Callable[[Any], str],
    action_label: Callable[[Any], str],
    on_select: Callable[[Any], None],
    empty_message: str,
) -> None:
    if not items:
        st.info(empty_message)
        return
    cols = st.columns(GRID_COLUMNS)
    for i, item in enumerate(items):
        with cols[i % GRID_COLUMNS]:
            with st.container(border=True):
                st.markdown(f"**{title(item)}**")
                sub = subtitle(item)
                if sub:
                    st.caption(sub)
                st.button(
                    action_label(item),
                    key=f"pick-{item.id}",
                    on_click=on_select,
                    args=(item,),
                    use_container_width=True,
                )


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

def _comment_keys(board: CommentBoard) -> tuple[str, str, str]:
    return (
        f"comment-name-{board.degree_id}",
        f"comment-email-{board.degree_id}",
        f"comment-text-{board.degree_id}",
    )


def _submit_comment(board: CommentBoard) -> None:
    name_key, email_key, text_key = _comment_keys(board)
    board.form.user_name = st.session_state.get(name_key, "")
    board.form.user_email = st.session_state.get(email_key, "")
    board.form.comment_text = st.session_state.get(text_key, "")

    notice = board.submit()
    st.session_state["notice"] = notice
    if not notice.is_error:
        for key in (name_key, email_key, text_key):
            st.session_state[key] = ""


def comment_section(board: CommentBoard, degree_name: str) -> None:
    name_key, email_key, text_key = _comment_keys(board)

    st.subheader(f"Comments for {degree_name}")
    with st.form(f"comment-form-{board.degree_id}", clear_on_submit=False):
        left, right = st.columns(2)
        left.text_input("Your Name *", key=name_key)
        right.text_input("Your Email (Optional)", key=email_key)
        st.text_area("Write your comment here... *", key=text_key)
        st.form_submit_button(
            "Submit Comment",
            on_click=_submit_comment,
            args=(board,),
        )

    if not board.comments:
        st.caption("No comments yet. Be the first to comment!")
        return
    for comment in board.comments:
        with st.container(border=True):
            st.markdown(f"**{comment.user_name}**  ·  {comment.created_at:%d %b %Y}")
            st.write(comment.comment_text)


def view_heading(title: str, hint: str) -> None:
    st.header(title)
    st.caption(hint)


VIEW_HINTS = {
    View.UNIVERSITIES: "Select your university to browse available degree programs and resources",
    View.DEGREES:      "Select a degree program to browse available semesters and subjects",
    View.SEMESTERS:    "Select a semester to browse available subjects and resources",
    View.SUBJECTS:     "Select a subject to browse its question papers and notes",
    View.RESOURCES:    "Download question papers, solved papers and study notes",
}
