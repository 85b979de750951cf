from repo_analyzer.models import CollectedFile, CommitInfo, Priority, RepoMetadata
from repo_analyzer.prompt_builder import (
    analyze_commit_quality, build_analysis_prompt, detect_ai_usage,
    detect_architecture, detect_tech_stack, format_code_files, get_code_statistics,
    select_prompt_files,
)


def make_file(path, priority=Priority.HIGH, content="x", is_test=False, is_config=False, language=None):
    return CollectedFile(
        path=path, content=content, size=len(content), language=language,
        is_test=is_test, is_config=is_config, is_documentation=False, priority=priority,
    )


def make_commit(message):
    return CommitInfo(sha="abc1234", message=message, author="Ada", date="", url="")


def test_select_prompt_files_keeps_tests_beyond_priority_caps():
    files = [make_file(f"src/m{i}.py") for i in range(60)]
    files += [make_file(f"docs/d{i}.md", Priority.MEDIUM) for i in range(40)]
    files += [make_file(f"misc/t{i}_test.go2", Priority.LOW, is_test=True) for i in range(3)]

    selection = select_prompt_files(files)

    assert len(selection["high"]) == 50
    assert len(selection["medium"]) == 30
    assert len(selection["test"]) == 3
    assert len(selection["selected"]) == 83
    assert selection["selected"][-1].path == "misc/t2_test.go2"


def test_select_prompt_files_deduplicates_overlapping_roles():
    both = make_file("package.json", is_config=True)
    selection = select_prompt_files([both])
    assert selection["selected"] == [both]


def test_format_code_files_truncates_long_files():
    long_file = make_file("src/big.py", content="a" * 3000, language="Python")
    text = format_code_files([long_file])

    assert "--- FILE: src/big.py (Python, 3000 bytes, Priority: high)" in text
    assert text.count("a") >= 2000
    assert "... [truncated]" in text


def test_format_code_files_stops_at_max_chars():
    files = [make_file(f"src/{i}.py", content="b" * 500) for i in range(10)]
    text = format_code_files(files, max_chars=1500)
    assert len(text) <= 1500 + 10
    assert "src/0.py" in text
    assert "src/9.py" not in text


def test_get_code_statistics_counts_python_definitions():
    content = "class A:\n    def f(self):\n        pass\n\ndef g():\n    pass\n"
    assert get_code_statistics(content, "Python") == f"(Lines: 6 | Chars: {len(content)} | Funcs/Classes: 3)"
    assert get_code_statistics("plain", None) == "(Lines: 1 | Chars: 5)"


def test_analyze_commit_quality():
    commits = [
        make_commit("feat(api): add pagination to listing"),
        make_commit("WIP"),
        make_commit("quick fix for the tests"),
        make_commit("Document the release process"),
    ]
    quality = analyze_commit_quality(commits)

    assert quality["clear_messages"] == 50
    assert quality["has_conventional"]
    assert quality["avg_length"] == round(sum(len(c.message) for c in commits) / 4)
    assert analyze_commit_quality([]) == {"avg_length": 0, "clear_messages": 0, "has_conventional": False}


def test_detect_architecture():
    flags = detect_architecture(["📁 frontend/", "📁 server/", "  📁 migrations/"])
    assert flags == {"frontend": True, "backend": True, "database": True, "full_stack": True}
    assert not detect_architecture(["📄 notes"])["full_stack"]


def test_detect_ai_usage():
    code = [make_file("src/llm.py", content="from openai import OpenAI")]
    assert detect_ai_usage(None, [], code)
    assert not detect_ai_usage("A calculator", ["📄 calc.go"], [make_file("calc.go", content="package calc")])


def test_detect_tech_stack_reads_manifests():
    files = [
        make_file("package.json", content='{"dependencies": {"react": "1"}, "devDependencies": {"vite": "5"}}'),
        make_file("pyproject.toml", content='[project]\nname = "x"\ndependencies = ["requests"]\n'),
        make_file("pubspec.yaml", content="name: app\ndependencies:\n  flutter:\n    sdk: flutter\n"),
        make_file("sub/package.json", content="not json"),
    ]
    stack, details = detect_tech_stack(files)

    assert stack == "Flutter/Dart, JavaScript/TypeScript, Python"
    assert "- react" in details
    assert "- vite" in details
    assert "- requests" in details
    assert "- flutter" in details


def test_detect_tech_stack_handles_broken_manifest():
    stack, details = detect_tech_stack([make_file("package.json", content="{broken")])
    assert stack == "JavaScript/TypeScript"
    assert "Could not parse file" in details
    assert detect_tech_stack([])[0] == "Undetermined"

    stack, details = detect_tech_stack([make_file("pyproject.toml", content='project = "oops"\n')])
    assert stack == "Python"
    assert "Dependencies (pyproject.toml)" not in details

    stack, details = detect_tech_stack([make_file("pyproject.toml", content="[project]\ndependencies = [{a = 1}, \"requests\"]\n")])
    assert stack == "Python"
    assert "- requests" in details


def test_build_analysis_prompt_includes_collection_stats():
    repo_data = RepoMetadata(
        owner="octo",
        name="demo",
        file_structure=["📁 src/", "  📄 app.ts"],
        commits=[make_commit("feat: start")],
        code_files=[make_file("src/app.ts", content="export const a = 1;", language="TypeScript")],
        files_analyzed=1,
        files_skipped=4,
        total_code_size=2048,
    )
    prompt = build_analysis_prompt(repo_data)

    assert "Repository: octo/demo" in prompt
    assert "Code Files Analyzed: 1 files (4 skipped due to size limits)" in prompt
    assert "Total Code Size: 2.00 KB" in prompt
    assert "--- FILE: src/app.ts (TypeScript" in prompt
    assert "NO README FOUND" in prompt
    assert "feat: start" in prompt
    assert "AI Usage Indicators: None" in prompt


def test_build_analysis_prompt_reports_ai_usage():
    repo_data = RepoMetadata(
        owner="octo",
        name="bot",
        code_files=[make_file("src/chat.py", content="from openai import OpenAI", language="Python")],
    )
    assert "AI Usage Indicators: Detected" in build_analysis_prompt(repo_data)
