"""
Streamlit frontend for ExamAce Vault.

Pages:
    Home           hero, search bar, type filter tabs, recently added resources
    Universities   drill-down University → Degree → Semester → Subject → Resource,
                   with the degree's comment section on the semester view
    About          static
    Contact        static info + message form (confirmation only)

The backend client is created once per process (st.cache_resource); each
browser session gets its own Navigator in st.session_state.

The search box (st_keyup) reports every keystroke to the SearchEngine, which
debounces the fetch; while one is pending a fragment polls and reruns the
page once results land.

Run with:
    streamlit run frontend/streamlit_app.py

Download buttons link to the API's /resources/{id}/download endpoint, so the
API (python app/app.py) must be reachable at CATALOG_API_URL.
"""

import logging
import sys
from pathlib import Path

import streamlit as st
from st_keyup import st_keyup

# Ensure project root is importable when launched via `streamlit run`
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog.backend import SupabaseBackend
from catalog.client import CatalogClient
from catalog.comments import CommentSection, Notice
from catalog.config import SEARCH_DEBOUNCE_SECONDS, setup_logging
from catalog.models import ResourceType
from catalog.navigation import Navigator, View
from frontend import ui

setup_logging()
log = logging.getLogger("frontend")

st.set_page_config(page_title="ExamAce Vault", page_icon="🎓", layout="wide")


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

@st.cache_resource
def _catalog() -> CatalogClient:
    log.info("Creating catalog client…")
    return CatalogClient(SupabaseBackend())


def _navigator() -> Navigator:
    if "navigator" not in st.session_state:
        nav = Navigator(_catalog())
        nav.go_home()
        st.session_state.navigator = nav
    return st.session_state.navigator


def _comments() -> CommentSection:
    if "comments" not in st.session_state:
        st.session_state.comments = CommentSection(_catalog())
    return st.session_state.comments


def _open(page: str, action=None) -> None:
    st.session_state.page = page
    if action is not None:
        action()


try:
    nav = _navigator()
except ValueError as exc:
    st.error(f"Backend not configured: {exc}")
    st.stop()

page = st.session_state.setdefault("page", "home")


# ---------------------------------------------------------------------------
# Sidebar navigation
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("🎓 ExamAce Vault")
    st.button("Home", on_click=_open, args=("home", nav.go_home), use_container_width=True)
    st.button("Universities", on_click=_open, args=("browse", nav.show_universities), use_container_width=True)
    st.button("All Degrees", on_click=_open, args=("browse", nav.show_degrees), use_container_width=True)
    st.button("About Us", on_click=_open, args=("about",), use_container_width=True)
    st.button("Contact Us", on_click=_open, args=("contact",), use_container_width=True)

ui.show_notice(st.session_state.pop("notice", None))


# ---------------------------------------------------------------------------
# Home
# ---------------------------------------------------------------------------

def _on_keystroke() -> None:
    nav.search.set_term(st.session_state.get("search_term", ""))


@st.fragment(run_every=SEARCH_DEBOUNCE_SECONDS)
def _await_search() -> None:
    # Polls until the debounced fetch lands, then redraws the page with it
    if not nav.search.pending:
        st.rerun()


def _on_type() -> None:
    nav.search.set_resource_type(st.session_state["resource_type"])


def render_home() -> None:
    st.title("Your Ultimate Exam Resource Hub")
    st.write(
        "Access previous year question papers, solved papers, and study notes. "
        "Everything you need to ace your degree exams, all in one place."
    )

    st_keyup(
        "Search",
        key="search_term",
        placeholder="Search by subject, course, or topic...",
        on_change=_on_keystroke,
        label_visibility="collapsed",
    )
    if nav.search.pending:
        _await_search()
    st.radio(
        "Resource type",
        options=[t.value for t in ResourceType],
        format_func=lambda v: ResourceType(v).label,
        key="resource_type",
        horizontal=True,
        on_change=_on_type,
        label_visibility="collapsed",
    )

    st.subheader("Search Results" if nav.search.searching else "Recently Added Resources")
    ui.resource_grid(nav.search.visible, "No resources found matching your search.")

    st.divider()
    st.subheader("Why Choose ExamAce Vault?")
    cols = st.columns(3)
    cols[0].markdown("**Comprehensive Collection**  \nQuestion papers, solved papers, and study notes covering all major subjects and courses.")
    cols[1].markdown("**High Quality Content**  \nAll resources are curated and verified for accuracy.")
    cols[2].markdown("**Free Access**  \nNo hidden fees, no subscriptions.")


# ---------------------------------------------------------------------------
# Drill-down
# ---------------------------------------------------------------------------

def render_browse() -> None:
    ui.breadcrumb(nav)
    s = nav.selection
    hint = ui.VIEW_HINTS.get(nav.view, "")

    if nav.view is View.HOME:
        st.info("Pick Universities or All Degrees in the sidebar to start browsing.")

    elif nav.view is View.UNIVERSITIES:
        ui.view_heading("Universities", hint)
        ui.entity_grid(
            nav.items,
            title=lambda u: u.name,
            subtitle=lambda u: u.location or "",
            action_label=lambda u: f"Browse {u.code} Degrees",
            on_select=nav.select_university,
            empty_message="No universities available yet.",
        )

    elif nav.view is View.DEGREES:
        ui.back_button(nav, "Back to Universities")
        heading = f"{s.university.name} - Available Degree Programs" if s.university else "All Degree Programs"
        ui.view_heading(heading, hint)
        ui.entity_grid(
            nav.items,
            title=lambda d: d.name,
            subtitle=lambda d: d.description or "",
            action_label=lambda d: f"Browse {d.code} Semesters",
            on_select=nav.select_degree,
            empty_message="No degree programs found.",
        )

    elif nav.view is View.SEMESTERS:
        ui.back_button(nav, "Back to Degrees")
        ui.view_heading(f"{s.degree.name} - Available Semesters", hint)
        ui.entity_grid(
            nav.items,
            title=lambda sem: sem.name,
            subtitle=lambda sem: f"Semester {sem.semester_number}",
            action_label=lambda sem: "Browse Subjects",
            on_select=nav.select_semester,
            empty_message="No semesters found for this degree.",
        )
        st.divider()
        ui.comment_section(_comments().enter(s.degree.id, nav.transitions), s.degree.name)

    elif nav.view is View.SUBJECTS:
        ui.back_button(nav, "Back to Semesters")
        ui.view_heading(f"{s.semester.name} - Subjects", hint)
        ui.entity_grid(
            nav.items,
            title=lambda sub: sub.name,
            subtitle=lambda sub: sub.code,
            action_label=lambda sub: "View Resources",
            on_select=nav.select_subject,
            empty_message="No subjects found for this semester.",
        )

    else:
        ui.back_button(nav, "Back to Subjects")
        ui.view_heading(f"{s.subject.name} ({s.subject.code})", hint)
        ui.resource_grid(nav.items, "No resources uploaded for this subject yet.")


# ---------------------------------------------------------------------------
# Static pages
# ---------------------------------------------------------------------------

def render_about() -> None:
    st.title("About ExamAce Vault")
    st.write(
        "ExamAce Vault collects previous year question papers, solved papers and "
        "study notes for university degree programs, organised by university, "
        "degree, semester and subject."
    )
    st.subheader("Our Mission")
    st.write("Make quality exam preparation material freely accessible to every student.")


def _send_message() -> None:
    keys = ("contact_name", "contact_email", "contact_subject", "contact_message")
    values = [st.session_state.get(k, "").strip() for k in keys]
    if not values[0] or not values[1] or not values[3]:
        st.session_state.notice = Notice("Error", "Please fill in all required fields", is_error=True)
        return
    st.session_state.notice = Notice(
        "Message sent successfully!", "We'll get back to you within 24 hours."
    )
    for k in keys:
        st.session_state[k] = ""


def render_contact() -> None:
    st.title("Contact Us")
    st.write("Questions about a paper, a missing subject or a broken download? Send us a message.")
    with st.form("contact-form"):
        left, right = st.columns(2)
        left.text_input("Name *", key="contact_name")
        right.text_input("Email *", key="contact_email")
        st.text_input("Subject", key="contact_subject")
        st.text_area("Message *", key="contact_message")
        st.form_submit_button("Send Message", on_click=_send_message)


{
    "home": render_home,
    "browse": render_browse,
    "about": render_about,
    "contact": render_contact,
}.get(page, render_home)()
