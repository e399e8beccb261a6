import streamlit as st


def wide_button(label: str, **kwargs):
    """Render a full-width Streamlit button, safely ignoring any width kwarg.

    - Pops an accidental "width" kwarg to avoid TypeError on st.button
    - Defaults to use_container_width=True so the button spans its container
    """
    kwargs.pop("width", None)
    kwargs.setdefault("use_container_width", True)
    return st.button(label, **kwargs)


def show_notice(notice) -> None:
    """Show a visit_form.Notice as a toast plus an inline message."""
    if notice is None:
        return
    icon = "⚠️" if notice.is_error else "✅"
    st.toast(f"**{notice.title}**: {notice.description}", icon=icon)
    if notice.is_error:
        st.error(f"**{notice.title}** - {notice.description}")
    else:
        st.success(f"**{notice.title}** - {notice.description}")


def queue_notice(notice) -> None:
    """Keep a notice across st.rerun() so it shows on the next pass."""
    st.session_state.setdefault("_notices", []).append(notice)


def flush_notices() -> None:
    for notice in st.session_state.pop("_notices", []):
        show_notice(notice)
