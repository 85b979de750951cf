# app.py
import streamlit as st
import pandas as pd

from repo_analyzer.analyzer import run_repo_analysis
from repo_analyzer.config import get_gemini_api_key, get_github_token
from repo_analyzer.models import DIMENSIONS
from repo_analyzer.report import dimension_rows, render_markdown_report, score_band

BAND_COLORS = {
    "excellent": "#d4edda",
    "good": "#e2f0d9",
    "fair": "#fff3cd",
    "poor": "#f8d7da",
}

st.set_page_config(
    page_title="RepoAnalyzer",
    page_icon="🔍",
    layout="wide"
)

st.title("🔍 RepoAnalyzer")
st.markdown("AI-powered code review for public GitHub repositories. The analyzer reads the **actual source files**, not just the README, and scores the project across eleven dimensions.")

repo_url = st.text_input(
    "Enter a GitHub repository URL",
    placeholder="https://github.com/owner/repo",
)

with st.expander("🔑 API Access"):
    access_token = st.text_input(
        "GitHub Personal Access Token (optional)",
        value=get_github_token() or "",
        type="password",
        help="Unauthenticated requests are limited to 60 per hour, which large repositories exhaust quickly."
    )
    api_key = st.text_input(
        "Gemini API Key",
        value=get_gemini_api_key() or "",
        type="password",
    )

if 'analysis' not in st.session_state:
    st.session_state.analysis = None
    st.session_state.repo_data = None

if st.button("🚀 Analyze Repository", use_container_width=True):
    if not repo_url:
        st.warning("Please enter a GitHub repository URL to begin.")
    else:
        with st.spinner("Reading repository files and code content, then analyzing implementation, quality, and architecture..."):
            repo_data, analysis, error = run_repo_analysis(
                repo_url,
                gh_token=access_token or None,
                api_key=api_key or None,
            )
        if error:
            st.error(error)
            st.session_state.analysis = None
        else:
            st.session_state.repo_data = repo_data
            st.session_state.analysis = analysis

# --- Display Results ---
if st.session_state.analysis:
    repo_data = st.session_state.repo_data
    analysis = st.session_state.analysis

    st.subheader(f"📊 {repo_data.full_name}")
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Score", f"{analysis.score}/100", score_band(analysis.score))
    col2.metric("Level", analysis.level)
    col3.metric("Stars", f"{repo_data.stars:,}")
    col4.metric("Forks", f"{repo_data.forks:,}")
    col5.metric("Files Analyzed", repo_data.files_analyzed, f"{repo_data.files_skipped} skipped", delta_color="off")

    st.markdown(f"**Working Status:** {analysis.working_status}. {analysis.working_status_details}")
    st.markdown(analysis.summary)

    df = pd.DataFrame(dimension_rows(analysis)).set_index("Dimension")
    st.dataframe(df.style
        .format("{:.0f}", subset=["Score"])
        .apply(lambda col: [f"background-color: {BAND_COLORS[score_band(v)]}" for v in col], subset=["Score"])
        .highlight_max(axis=0, color='#d4edda', subset=["Score"])
        .highlight_min(axis=0, color='#f8d7da', subset=["Score"]),
        use_container_width=True
    )

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**[ Strengths ]**")
        st.markdown("\n".join(f"- {s}" for s in analysis.strengths) or "- None")
    with col2:
        st.markdown("**[ Weaknesses ]**")
        st.markdown("\n".join(f"- {w}" for w in analysis.weaknesses) or "- None")

    st.markdown("---")
    st.subheader("🔍 Dimension Details")
    for prefix, label in DIMENSIONS:
        score, explanation, points = analysis.dimension(prefix)
        with st.expander(f"{label}: {score}/100"):
            st.markdown(explanation)
            st.markdown("\n".join(f"- {p}" for p in points))

    st.subheader("⚠️ Main Issues")
    st.markdown("\n".join(f"- {i}" for i in analysis.main_issues) or "- None")
    with st.expander(f"All Issues Found ({len(analysis.issues_found)})"):
        st.markdown("\n".join(f"- {i}" for i in analysis.issues_found) or "- None")

    st.subheader("🧭 Roadmap")
    if analysis.roadmap:
        st.dataframe(pd.DataFrame([vars(step) for step in analysis.roadmap]), use_container_width=True)
    st.markdown("\n".join(f"1. {step}" for step in analysis.next_steps))

    st.download_button(
        label="📥 Download Report.md",
        data=render_markdown_report(repo_data, analysis),
        file_name=f"{repo_data.owner}_{repo_data.name}_analysis.md",
        mime="text/markdown",
        use_container_width=True
    )
