from typing import List, Sequence

import streamlit as st

from ..config import CSV_PREFIX, GEOJSON_PREFIX, Settings, load_settings
from ..errors import MeshScoutError, NoRunError
from ..openmaps.geocoding import lookup_postal_code
from ..openmaps.models import Center, RawElement, ScoredCandidate
from ..openmaps.overpass import fetch_elements
from ..siting.export import (
    CSV_MEDIA_TYPE,
    GEOJSON_MEDIA_TYPE,
    export_filename,
    geojson_text,
    to_csv,
)
from ..siting.search import SiteSearch

DEFAULT_RADIUS_KM = 3.0
DEFAULT_MAX_CANDIDATES = 25

SESSION_SEARCH_KEY = "meshscout_search"
SESSION_STATUS_KEY = "meshscout_status"


@st.cache_data(ttl=86400, show_spinner=False)
def cached_lookup(postal_code: str, base_url: str, timeout: float) -> Center:
    return lookup_postal_code(postal_code, base_url=base_url, timeout=timeout)


@st.cache_data(ttl=600, show_spinner=False)
def cached_elements(query: str, endpoint: str, timeout: float) -> List[RawElement]:
    return fetch_elements(query, endpoint=endpoint, timeout=timeout)


def get_search() -> SiteSearch:
    search = st.session_state.get(SESSION_SEARCH_KEY)
    if search is None:
        settings: Settings = load_settings()
        search = SiteSearch(
            settings=settings,
            geocoder=lambda code: cached_lookup(code, settings.geocoder_url, settings.timeout_s),
            element_source=lambda query: cached_elements(query, settings.overpass_url, settings.timeout_s),
        )
        st.session_state[SESSION_SEARCH_KEY] = search
    return search


def configure_page() -> None:
    st.set_page_config(page_title="MeshScout", page_icon="📡", layout="wide")


def render_intro(min_height_m: float) -> None:
    st.title("📡 MeshScout")
    st.markdown(
        f"""
        Find tall structures near a US ZIP code that could host a mesh radio node.
        Buildings and towers of at least **{min_height_m:g} m** are ranked by height,
        by how many hospitals, fire and police stations, substations and water towers
        sit within 1 km and 3 km, and by distance to the nearest one.
        """
    )


def set_status(message: str, error: bool = False) -> None:
    st.session_state[SESSION_STATUS_KEY] = (message, error)


def render_status() -> None:
    status = st.session_state.get(SESSION_STATUS_KEY)
    if not status:
        return
    message, error = status
    if error:
        st.error(message)
    else:
        st.info(message)


def handle_search(search: SiteSearch, zip_code: str, radius_km: float, max_candidates: int) -> None:
    placeholder = st.empty()

    def report(message: str) -> None:
        set_status(message)
        placeholder.info(message)

    try:
        search.run(zip_code, radius_km, max_candidates, on_status=report)
    except MeshScoutError as exc:
        set_status(f"Error: {exc.message}", error=True)
    finally:
        placeholder.empty()


def render_search_form(search: SiteSearch) -> None:
    with st.form("search_form"):
        zip_code = st.text_input("ZIP code", max_chars=5)
        radius_km = st.number_input("Radius (km)", min_value=0.1, value=DEFAULT_RADIUS_KM, step=0.5)
        max_candidates = st.number_input(
            "Max candidates", min_value=1, value=DEFAULT_MAX_CANDIDATES, step=1
        )
        submitted = st.form_submit_button("Search")

    if submitted:
        handle_search(search, zip_code, float(radius_km), int(max_candidates))


def format_candidate(rank: int, item: ScoredCandidate) -> str:
    candidate, score = item.candidate, item.score
    if score.has_nearest:
        nearest = f"{score.nearest_title} ({score.nearest_meters / 1000:.2f} km)"
    else:
        nearest = "n/a"
    return (
        f"**#{rank} [{candidate.title}]({candidate.reference_url})** · "
        f"Score {score.total:.1f} · Height {candidate.height_meters:.1f} m  \n"
        f"Nearest critical: {nearest} · within 1km: {score.within_1k} · "
        f"within 3km: {score.within_3k} · `{candidate.kind}`"
    )


def render_results(candidates: Sequence[ScoredCandidate]) -> None:
    for rank, item in enumerate(candidates, start=1):
        with st.container(border=True):
            st.markdown(format_candidate(rank, item))


def render_downloads(search: SiteSearch) -> None:
    try:
        run = search.require_run()
    except NoRunError as exc:
        st.caption(exc.message)
        return

    st.subheader(f"Top {len(run.candidates)} candidates near {run.center.label}")
    csv_column, geojson_column = st.columns(2)
    with csv_column:
        st.download_button(
            "Export CSV",
            data=to_csv(run),
            file_name=export_filename(CSV_PREFIX, run.postal_code, "csv"),
            mime=CSV_MEDIA_TYPE,
            use_container_width=True,
        )
    with geojson_column:
        st.download_button(
            "Export GeoJSON",
            data=geojson_text(run),
            file_name=export_filename(GEOJSON_PREFIX, run.postal_code, "geojson"),
            mime=GEOJSON_MEDIA_TYPE,
            use_container_width=True,
        )
    render_results(run.candidates)


def main() -> None:
    configure_page()
    try:
        search = get_search()
    except MeshScoutError as exc:
        st.error(f"Configuration error: {exc.message}")
        return
    render_intro(search.settings.min_height_m)
    render_search_form(search)
    render_status()
    render_downloads(search)


if __name__ == "__main__":
    main()
