# src/repo_analyzer/prompt_builder.py
import json
import re

import tomli
import yaml

from .models import Priority

MAX_HIGH_PRIORITY_FILES = 50
MAX_MEDIUM_PRIORITY_FILES = 30
MAX_CONFIG_FILES = 20
MAX_TEST_FILES = 20
MAX_CODE_CHARS = 150000
MAX_FILE_CHARS = 2000
MAX_STRUCTURE_LINES = 200
MAX_README_CHARS = 8000

CONVENTIONAL_COMMIT = re.compile(r'^(feat|fix|docs|style|refactor|test|chore|perf|ci|build|revert)(\(.+\))?:', re.IGNORECASE)

FRONTEND_PATTERNS = [
    re.compile(r'(frontend|client|src|public|components|pages|app|ui)', re.IGNORECASE),
    re.compile(r'(react|vue|angular|svelte|next|nuxt|gatsby)', re.IGNORECASE),
]
BACKEND_PATTERNS = [
    re.compile(r'(backend|server|api|routes|controllers|models|services)', re.IGNORECASE),
    re.compile(r'(express|fastapi|django|flask|spring|nest)', re.IGNORECASE),
]
DATABASE_PATTERN = re.compile(r'(database|db|models|schema|migrations|prisma|typeorm|sequelize)', re.IGNORECASE)

AI_PATTERNS = [
    (re.compile(r'openai|anthropic|claude|gpt|gemini|ai model|llm|langchain|llama', re.IGNORECASE), ("readme", "structure", "code")),
    (re.compile(r'(ai|artificial intelligence|machine learning|ml|neural)', re.IGNORECASE), ("readme", "code")),
    (re.compile(r'(prompt|embedding|vector|rag|fine.?tun)', re.IGNORECASE), ("readme", "structure", "code")),
    (re.compile(r'(tensorflow|pytorch|keras|transformers|huggingface)', re.IGNORECASE), ("structure", "code")),
]


def _dedupe_by_path(files):
    unique = {}
    for f in files:
        unique[f.path] = f
    return list(unique.values())


def select_prompt_files(code_files):
    """Pick a role-balanced subset so configs and tests survive next to the high-priority code."""
    high = [f for f in code_files if f.priority == Priority.HIGH][:MAX_HIGH_PRIORITY_FILES]
    medium = [f for f in code_files if f.priority == Priority.MEDIUM][:MAX_MEDIUM_PRIORITY_FILES]
    configs = [f for f in code_files if f.is_config][:MAX_CONFIG_FILES]
    tests = [f for f in code_files if f.is_test][:MAX_TEST_FILES]
    return {
        "high": high,
        "medium": medium,
        "config": configs,
        "test": tests,
        "selected": _dedupe_by_path(high + medium + configs + tests),
    }


def get_code_statistics(content, language):
    """Generate a statistics string for a file (lines, chars, functions/classes)."""
    line_count = len(content.splitlines())
    chars = len(content)
    count = 0
    if language == "Python":
        count = len(re.findall(r'^\s*(def|class)\s', content, re.MULTILINE))
    elif language in ("JavaScript", "TypeScript"):
        count = len(re.findall(r'^\s*(function|class|const|let|var)\s+.*\s*(=>|\()', content, re.MULTILINE))
    elif language in ("Java", "Kotlin", "C#", "Go", "Rust", "Swift"):
        count = len(re.findall(r'^\s*(public|private|protected|internal)?\s*(class|struct|func|fn|fun|void|static)\s', content, re.MULTILINE))
    label = "Funcs/Classes" if count > 0 else ""
    return f"(Lines: {line_count} | Chars: {chars}" + (f" | {label}: {count}" if label else "") + ")"


def format_code_files(files, max_chars=MAX_CODE_CHARS):
    total_chars = 0
    formatted = []
    for f in files:
        if total_chars >= max_chars:
            break
        content = f.content
        if len(content) > MAX_FILE_CHARS:
            content = content[:MAX_FILE_CHARS] + '\n... [truncated]'
        stats_str = get_code_statistics(f.content, f.language)
        section = (
            f"\n--- FILE: {f.path} ({f.language or 'Unknown'}, {f.size} bytes, "
            f"Priority: {f.priority.value}) {stats_str} ---\n{content}\n"
        )
        if total_chars + len(section) > max_chars:
            break
        formatted.append(section)
        total_chars += len(section)
    return '\n'.join(formatted)


def analyze_commit_quality(commits):
    if not commits:
        return {"avg_length": 0, "clear_messages": 0, "has_conventional": False}

    lengths = [len(c.message) for c in commits]
    avg_length = round(sum(lengths) / len(lengths))
    clear_count = sum(
        1 for c in commits
        if 10 < len(c.message) < 100 and 'WIP' not in c.message and 'fix' not in c.message
    )
    return {
        "avg_length": avg_length,
        "clear_messages": round(clear_count / len(commits) * 100),
        "has_conventional": any(CONVENTIONAL_COMMIT.search(c.message) for c in commits),
    }


def detect_architecture(file_structure):
    structure_str = '\n'.join(file_structure).lower()
    has_frontend = any(p.search(structure_str) for p in FRONTEND_PATTERNS)
    has_backend = any(p.search(structure_str) for p in BACKEND_PATTERNS)
    return {
        "frontend": has_frontend,
        "backend": has_backend,
        "database": bool(DATABASE_PATTERN.search(structure_str)),
        "full_stack": has_frontend and has_backend,
    }


def detect_ai_usage(readme, file_structure, code_files):
    sources = {
        "readme": (readme or '').lower(),
        "structure": '\n'.join(file_structure).lower(),
        "code": '\n'.join(f.content for f in code_files).lower(),
    }
    for pattern, keys in AI_PATTERNS:
        if pattern.search(''.join(sources[k] for k in keys)):
            return True
    return False


def structure_depth(file_structure):
    if not file_structure:
        return 0
    return max(len(re.findall(r'  ', line)) for line in file_structure)


def detect_tech_stack(code_files):
    """Analyze collected dependency manifests to determine tech stack and list dependencies."""
    by_name = {}
    for f in code_files:
        # root-level manifests only
        if '/' not in f.path:
            by_name[f.path] = f.content

    tech_stack = set()
    dep_details = []
    if "requirements.txt" in by_name:
        tech_stack.add("Python")
        dep_details.append("Dependencies (requirements.txt):\n" + by_name["requirements.txt"].strip())
    if "pyproject.toml" in by_name:
        tech_stack.add("Python")
        try:
            content = tomli.loads(by_name["pyproject.toml"])
            project = content.get("project")
            deps = project.get("dependencies", []) if isinstance(project, dict) else []
            if deps:
                dep_details.append("Dependencies (pyproject.toml):\n- " + "\n- ".join(str(d) for d in deps))
        except (tomli.TOMLDecodeError, AttributeError, TypeError):
            dep_details.append("Dependencies (pyproject.toml):\n- Could not parse file.")
    if "package.json" in by_name:
        tech_stack.add("JavaScript/TypeScript")
        try:
            content = json.loads(by_name["package.json"])
            deps, dev_deps = content.get("dependencies", {}), content.get("devDependencies", {})
            if deps:
                dep_details.append("Dependencies (package.json):\n- " + "\n- ".join(deps.keys()))
            if dev_deps:
                dep_details.append("Dev Dependencies (package.json):\n- " + "\n- ".join(dev_deps.keys()))
        except (json.JSONDecodeError, AttributeError):
            dep_details.append("Dependencies (package.json):\n- Could not parse file.")
    if "pubspec.yaml" in by_name:
        tech_stack.add("Flutter/Dart")
        try:
            content = yaml.safe_load(by_name["pubspec.yaml"]) or {}
            deps = content.get("dependencies") or {}
            if deps:
                dep_details.append("Dependencies (pubspec.yaml):\n- " + "\n- ".join(deps.keys()))
        except (yaml.YAMLError, AttributeError):
            dep_details.append("Dependencies (pubspec.yaml):\n- Could not parse file.")
    if "go.mod" in by_name:
        tech_stack.add("Go")
    if "Cargo.toml" in by_name:
        tech_stack.add("Rust")

    if not tech_stack:
        return "Undetermined", "No common dependency files were found among the collected files."
    return ", ".join(sorted(tech_stack)), "\n\n".join(dep_details)


def _yes_no(flag):
    return 'Yes' if flag else 'No'


def build_analysis_prompt(repo_data):
    """Assemble the full reviewer prompt for a RepoMetadata snapshot."""
    commit_messages = '\n'.join(c.message for c in repo_data.commits[:30])
    commit_quality = analyze_commit_quality(repo_data.commits)
    test_types = [t.type for t in repo_data.test_files]
    depth = structure_depth(repo_data.file_structure)
    has_proper_structure = depth > 1 and len(repo_data.file_structure) > 10
    architecture = detect_architecture(repo_data.file_structure)
    ai_usage = detect_ai_usage(repo_data.readme_content, repo_data.file_structure, repo_data.code_files)
    tech_stack, dep_details = detect_tech_stack(repo_data.code_files)

    selection = select_prompt_files(repo_data.code_files)
    selected = selection["selected"]
    code_content = format_code_files(selected, MAX_CODE_CHARS)

    structure_lines = '\n'.join(repo_data.file_structure[:MAX_STRUCTURE_LINES])
    if len(repo_data.file_structure) > MAX_STRUCTURE_LINES:
        structure_lines += f"\n... and {len(repo_data.file_structure) - MAX_STRUCTURE_LINES} more files"

    readme = (
        repo_data.readme_content[:MAX_README_CHARS] if repo_data.readme_content
        else "NO README FOUND - This is a MAJOR red flag indicating incomplete project."
    )
    hidden_note = ""
    if len(repo_data.code_files) > len(selected):
        hidden_note = (
            f"\nNote: {len(repo_data.code_files) - len(selected)} additional files were analyzed "
            "but not shown in detail due to size limits.\n"
        )
    merged_prs = sum(1 for pr in repo_data.pull_requests if pr.merged)
    protected = sum(1 for b in repo_data.branches if b.protected)

    return f"""
You are a Senior Software Engineer with 10+ years of experience reviewing code at top tech companies. Your task is to analyze this GitHub repository by examining the ACTUAL CODE CONTENT, not just file names or README.

Base your analysis on the actual implementation: code quality, patterns, architecture and design decisions, organization, real functionality and completeness, and maintainability as visible in the files below.

=== REPOSITORY INFORMATION ===

Basic Info:
- Repository: {repo_data.owner}/{repo_data.name}
- Description: {repo_data.description or "No description provided"}
- Primary Language: {repo_data.language}
- All Languages: {', '.join(repo_data.languages.keys()) or 'Unknown'}
- Detected Technology Stack: {tech_stack}
- Stars: {repo_data.stars} | Forks: {repo_data.forks}
- Open Issues: {repo_data.open_issues}
- Last Updated: {repo_data.last_update}
- Default Branch: {repo_data.default_branch}

Project Structure:
{structure_lines}
- Total Files: {repo_data.total_files}
- Structure Depth: {depth} levels
- Has Organized Structure: {_yes_no(has_proper_structure)}

Dependencies:
{dep_details}

Architecture Indicators:
- Frontend Detected: {_yes_no(architecture["frontend"])}
- Backend Detected: {_yes_no(architecture["backend"])}
- Database Detected: {_yes_no(architecture["database"])}
- Full-Stack: {_yes_no(architecture["full_stack"])}
- AI Usage Indicators: {'Detected' if ai_usage else 'None'}

Documentation:
- README: {'Present' if repo_data.readme_content else 'MISSING - CRITICAL ISSUE'}
- LICENSE: {'Present' if repo_data.has_license else 'Missing'}
- CONTRIBUTING: {'Present' if repo_data.has_contributing else 'Missing'}
- CODE_OF_CONDUCT: {'Present' if repo_data.has_code_of_conduct else 'Missing'}

README Content:
{readme}

=== ACTUAL CODE FILES ANALYZED ===

Code Files Analyzed: {repo_data.files_analyzed} files ({repo_data.files_skipped} skipped due to size limits)
Total Code Size: {repo_data.total_code_size / 1024:.2f} KB
High Priority Files: {len(selection["high"])}
Medium Priority Files: {len(selection["medium"])}
Config Files: {len(selection["config"])}
Test Files: {len(selection["test"])}

{code_content}
{hidden_note}
Testing:
- Test Files Found: {len(repo_data.test_files)}
- Test Types: {', '.join(test_types) or 'None'}
- Test Coverage: {'Has tests' if repo_data.test_files else 'No tests detected'}

CI/CD:
- Has CI/CD: {_yes_no(repo_data.has_cicd)}
- CI/CD Configs: {', '.join(repo_data.cicd_configs) or 'None'}

Git Practices:
- Total Branches: {len(repo_data.branches)}
- Protected Branches: {protected}
- Recent Commits (last 30): {len(repo_data.commits)}
- Pull Requests: {len(repo_data.pull_requests)} ({merged_prs} merged)

Recent Commit Messages:
{commit_messages or 'No commits found - project may be empty or abandoned'}

Commit Quality:
- Average message length: {commit_quality["avg_length"]} chars
- Clear messages: {commit_quality["clear_messages"]}%
- Has conventional commits: {_yes_no(commit_quality["has_conventional"])}

=== ANALYSIS DIMENSIONS ===

Score each dimension from 0 to 100 with 3-5 evidence-based points:
1. Code quality & readability
2. Project structure & organization
3. Documentation & clarity
4. Testing (one factor, not the primary focus)
5. Real-world relevance & usefulness
6. Commit & development consistency (git practices)
7. Architecture
8. Optimization
9. Functionality
10. Connectivity (frontend-backend integration, API design, data flow)
11. Completeness

Also report: AI usage (technologies and how they are integrated), all issues found, the 5-7 main issues, prioritized next steps, a roadmap, and the working status (Fully Functional, Partially Working, Not Working or Unknown) with evidence.

=== CRITICAL GUIDELINES ===

- Scores must be consistent with the working status: "Partially Working" means completenessScore 40-60, "Not Working" means 0-30, "Fully Functional" allows 70-100.
- Main issues focus on functionality, architecture and code quality, not primarily unit testing.
- Be honest and specific; do not inflate scores.

Generate your comprehensive analysis now:
"""
