# src/repo_analyzer/report.py
from .models import DIMENSIONS


def score_band(score):
    if score >= 90:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 50:
        return "fair"
    return "poor"


def dimension_rows(analysis):
    """One row per scored dimension, ready for a table."""
    rows = []
    for prefix, label in DIMENSIONS:
        score, explanation, points = analysis.dimension(prefix)
        rows.append({
            "Dimension": label,
            "Score": score,
            "Band": score_band(score),
            "Explanation": explanation,
            "Points": len(points),
        })
    return rows


def _bullets(items, empty="- None"):
    if not items:
        return empty
    return "\n".join(f"- {item}" for item in items)


def render_markdown_report(repo_data, analysis):
    """Render the assessment as a standalone Markdown document."""
    parts = []
    header = f"""# REPOSITORY ANALYSIS: {repo_data.full_name}
- **Description:** {repo_data.description}
- **Primary Language:** {repo_data.language}
- **Stars / Forks:** {repo_data.stars} / {repo_data.forks}
- **Default Branch:** {repo_data.default_branch}
- **Files Analyzed:** {repo_data.files_analyzed} ({repo_data.files_skipped} skipped, {repo_data.total_code_size / 1024:.2f} KB)
---
"""
    parts.append(header)
    parts.append(
        f"# 1. Overall Assessment\n\n"
        f"**Score:** {analysis.score}/100 ({score_band(analysis.score)}) | **Level:** {analysis.level}\n\n"
        f"**Working Status:** {analysis.working_status}. {analysis.working_status_details}\n\n"
        f"{analysis.summary}\n\n---"
    )
    parts.append(
        f"# 2. Strengths & Weaknesses\n\n**Strengths:**\n{_bullets(analysis.strengths)}\n\n"
        f"**Weaknesses:**\n{_bullets(analysis.weaknesses)}\n\n---"
    )

    dimension_sections = ["# 3. Dimension Scores\n"]
    for prefix, label in DIMENSIONS:
        score, explanation, points = analysis.dimension(prefix)
        dimension_sections.append(f"## {label}: {score}/100\n\n{explanation}\n\n{_bullets(points)}\n")
    parts.append("\n".join(dimension_sections) + "\n---")

    parts.append(
        "# 4. In-Depth Analysis\n\n"
        f"**Tech Stack:** {analysis.tech_stack_analysis}\n\n"
        f"**Architecture:** {analysis.architecture_analysis}\n\n"
        f"**Optimization:** {analysis.optimization_analysis}\n\n"
        f"**Functionality:** {analysis.functionality_analysis}\n\n"
        f"**Connectivity:** {analysis.connectivity_analysis}\n\n"
        f"**Completeness:** {analysis.completeness_analysis}\n\n"
        f"**AI Usage Detected:** {'Yes' if analysis.ai_usage_detected else 'No'}. {analysis.ai_usage_details}\n\n---"
    )
    parts.append(
        f"# 5. Issues\n\n**Main Issues:**\n{_bullets(analysis.main_issues)}\n\n"
        f"**All Issues Found:**\n{_bullets(analysis.issues_found)}\n\n"
        f"**Next Steps:**\n{_bullets(analysis.next_steps)}\n\n---"
    )

    if analysis.roadmap:
        roadmap_list = "\n".join(
            f"- **[{step.priority}] {step.title}** ({step.category}): {step.description}"
            for step in analysis.roadmap
        )
        parts.append(f"# 6. Roadmap\n\n{roadmap_list}\n")
    return "\n".join(parts)
