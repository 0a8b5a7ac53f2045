from site_builder.utils.prompt_builder import (
    TRUNCATION_MARKER,
    build_analysis_prompt,
    build_assistant_prompt,
    build_fix_prompt,
    build_plan_prompt,
    build_task_prompt,
    format_history,
    truncate_content,
)


def test_truncate_content_cuts_to_budget_and_appends_marker():
    content = "a" * 3500
    out = truncate_content(content, 3000)
    assert out == "a" * 3000 + "\n[CONTENT TRUNCATED]"
    assert out.endswith(TRUNCATION_MARKER)


def test_truncate_content_leaves_short_content_alone():
    assert truncate_content("abc", 3) == "abc"
    assert truncate_content("abc", 10) == "abc"


def test_assistant_prompt_embeds_files_message_and_format_rules():
    prompt = build_assistant_prompt(
        "add a footer",
        {"index.html": "<body></body>", "big.js": "x" * 50},
        file_char_budget=10,
    )
    assert "User message: add a footer" in prompt
    assert "=== index.html ===\n<body></body>" in prompt
    assert "=== big.js ===\n" + "x" * 10 + TRUNCATION_MARKER in prompt
    assert '"files"' in prompt
    assert "Never use placeholders" in prompt


def test_assistant_prompt_includes_recent_history_only():
    history = [{"type": "user", "content": f"msg{i}"} for i in range(5)]
    prompt = build_assistant_prompt("next", {}, history=history, history_limit=2)
    assert "msg2" not in prompt
    assert "User: msg3" in prompt
    assert "User: msg4" in prompt


def test_format_history_roles_and_disabled_limit():
    history = [{"type": "user", "content": "hi"}, {"type": "ai", "content": "hello"}]
    assert format_history(history, 10) == "User: hi\nAssistant: hello"
    assert format_history(history, 0) == ""


def test_plan_prompt_lists_files():
    prompt = build_plan_prompt("add login", ["index.html", "src/App.tsx"])
    assert 'User Request: "add login"' in prompt
    assert "- index.html\n- src/App.tsx" in prompt
    assert '"tasks"' in prompt


def test_task_prompt_marks_affected_files_and_truncates():
    task = {
        "title": "Footer",
        "description": "Add footer",
        "priority": "high",
        "affectedFiles": ["index.html"],
        "codeChanges": [{"file": "index.html", "action": "modify", "description": "append footer"}],
    }
    files = {"index.html": "<body></body>", "style.css": "c" * 20}
    prompt = build_task_prompt(task, files, file_char_budget=5)
    assert "=== index.html (MODIFY THIS) ===\n<body" in prompt
    assert "=== style.css (REFERENCE) ===\nccccc" + TRUNCATION_MARKER in prompt
    assert "• MODIFY index.html: append footer" in prompt


def test_analysis_prompt_uses_ellipsis_marker():
    prompt = build_analysis_prompt({"a.js": "z" * 20}, file_char_budget=4)
    assert "=== a.js ===\nzzzz...\n" in prompt
    assert '"suggestions"' in prompt


def test_fix_prompt_includes_full_affected_files():
    issue = {"issue": "Broken button", "fix": "bind onClick", "affectedFiles": ["App.tsx", "gone.tsx"]}
    prompt = build_fix_prompt(issue, {"App.tsx": "y" * 5000})
    assert "y" * 5000 in prompt
    assert "=== gone.tsx ===\nFile not found" in prompt
