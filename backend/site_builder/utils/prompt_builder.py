from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

TRUNCATION_MARKER = "\n[CONTENT TRUNCATED]"

OUTPUT_FORMAT_RULES = """
CRITICAL RULES FOR OUTPUT FORMAT:
- Output ONLY one valid JSON object. Nothing else.
- Do NOT wrap the JSON in markdown code blocks (no ```json or ```).
- Do NOT add any explanatory text before or after the JSON.
- Every entry in "files" must be the COMPLETE file content with all changes applied.
- Never use placeholders, ellipsis, "..." or "keep existing code" comments.
""".strip()


def truncate_content(content: str, budget: int, marker: str = TRUNCATION_MARKER) -> str:
    """Cut ``content`` to ``budget`` characters and append ``marker`` when anything was removed."""
    if len(content) <= budget:
        return content
    return content[:budget] + marker


def format_project_files(
    files: Mapping[str, str],
    budget: int,
    *,
    marker: str = TRUNCATION_MARKER,
    modify: Optional[Iterable[str]] = None,
) -> str:
    """
    Render ``=== path ===`` sections for each file.

    When ``modify`` is given, each header is tagged ``(MODIFY THIS)`` or
    ``(REFERENCE)``.
    """
    targets = set(modify) if modify is not None else None
    sections: List[str] = []
    for path, content in files.items():
        header = f"=== {path} ==="
        if targets is not None:
            tag = "(MODIFY THIS)" if path in targets else "(REFERENCE)"
            header = f"=== {path} {tag} ==="
        sections.append(f"{header}\n{truncate_content(content or '', budget, marker)}\n")
    return "\n".join(sections) if sections else "(no files yet)"


def format_history(history: Sequence[Mapping[str, Any]], limit: int) -> str:
    if limit <= 0 or not history:
        return ""
    lines = []
    for entry in list(history)[-limit:]:
        role = "User" if entry.get("type") == "user" else "Assistant"
        lines.append(f"{role}: {entry.get('content', '')}")
    return "\n".join(lines)


def build_assistant_prompt(
    message: str,
    project_content: Mapping[str, str],
    *,
    history: Sequence[Mapping[str, Any]] = (),
    file_char_budget: int = 3000,
    history_limit: int = 50,
) -> str:
    history_text = format_history(history, history_limit)
    history_block = f"\nConversation so far (oldest first):\n{history_text}\n" if history_text else ""
    files_block = format_project_files(project_content, file_char_budget)
    prompt = f"""
You are an advanced AI web app builder and agent. You work directly with code files - no explanations, just code modifications. When the user requests changes, modifications, or fixes, respond with updated file contents.

Current project files:
{files_block}
{history_block}
User message: {message}

IMPORTANT:
- Always provide COMPLETE file contents, never truncated
- Apply the user's request directly to the code
- Generate production-ready, functional code
- Use modern React patterns, TypeScript, and Tailwind CSS

{OUTPUT_FORMAT_RULES}

Respond with this exact JSON structure:
{{"response": "Short description of what changed", "files": {{"path/to/file.ext": "complete updated file content"}}}}
""".strip()
    return prompt


def build_project_prompt(
    *,
    title: str,
    description: str,
    framework: str,
    framework_label: str,
    theme_colors: Mapping[str, str],
    template: Optional[str],
    animations: Sequence[str],
    special_requests: Optional[str],
) -> str:
    prompt = f"""
You are an expert full-stack developer and AI agent who creates complete, production-ready applications. You MUST generate fully functional, deployable projects with NO placeholders, NO mockups, and REAL implementations.

PROJECT SPECIFICATION:
- Title: {title}
- Description: {description}
- Framework: {framework} ({framework_label})
- Color Theme: {json.dumps(dict(theme_colors))}
- Template Base: {template or 'Custom Build'}
- Animations: {', '.join(animations) or 'Smooth Transitions'}
- Special Requests: {special_requests or 'None'}

MANDATORY REQUIREMENTS:
1. Complete project structure: all source files, package.json with dependencies (for framework projects), configuration files, README.md and .gitignore.
2. Production-ready code with zero placeholders, responsive design, accessibility, error handling and loading states.
3. Real functionality: every button, form and interactive element must work.
4. Multiple interconnected pages or sections with navigation, validated forms and smooth animations.

{OUTPUT_FORMAT_RULES}

Respond in this exact JSON format:
{{
  "files": {{
    "filename.ext": "complete file content with no truncation",
    "folder/filename.ext": "complete file content"
  }},
  "structure": "Explanation of project architecture and file organization",
  "features": ["List of implemented features"],
  "instructions": "Setup, development, and deployment instructions",
  "framework": "{framework}",
  "dependencies": ["List of required dependencies and their purposes"]
}}
""".strip()
    return prompt


def build_plan_prompt(message: str, file_names: Iterable[str]) -> str:
    structure = "\n".join(f"- {name}" for name in file_names) or "- (empty project)"
    prompt = f"""
Analyze the following user request and create a detailed to-do list for implementing the changes.

User Request: "{message}"

Current Project Structure:
{structure}

Return ONLY valid JSON with this exact structure (no other text, no markdown):
{{
  "title": "Brief title for this set of changes",
  "description": "What will be accomplished",
  "totalEstimatedTime": "Total time estimate",
  "tasks": [
    {{
      "id": "unique-id",
      "title": "Task title",
      "description": "Detailed description of what needs to be done",
      "priority": "low|medium|high|critical",
      "estimatedTime": "time estimate",
      "affectedFiles": ["files that will be modified"],
      "dependencies": ["task ids this depends on"],
      "codeChanges": [
        {{"file": "filename", "action": "create|modify|delete", "description": "What changes will be made", "preview": "Brief code preview if helpful"}}
      ],
      "aiAnalysis": {{"complexity": 1, "riskLevel": "low|medium|high", "recommendations": ["recommendations"]}}
    }}
  ]
}}

Make tasks granular and specific. Each task should be independently executable.
""".strip()
    return prompt


def build_task_prompt(
    task: Mapping[str, Any],
    project_content: Mapping[str, str],
    *,
    file_char_budget: int = 3000,
) -> str:
    affected = list(task.get("affectedFiles") or [])
    changes = "\n".join(
        f"• {str(change.get('action', 'modify')).upper()} {change.get('file', '')}: {change.get('description', '')}"
        + (f"\n  Preview: {change['preview']}" if change.get("preview") else "")
        for change in task.get("codeChanges") or []
    ) or "• (none listed)"
    ai = task.get("aiAnalysis") or {}
    recommendations = "; ".join(ai.get("recommendations") or []) or "None"
    files_block = format_project_files(project_content, file_char_budget, modify=affected)
    prompt = f"""
Execute this specific task as an AI coding agent:

TASK DETAILS:
Title: {task.get('title', '')}
Description: {task.get('description', '')}
Priority: {task.get('priority', 'medium')}
Estimated Time: {task.get('estimatedTime', 'Unknown')}

AFFECTED FILES: {', '.join(affected) or 'None specified'}

REQUIRED CODE CHANGES:
{changes}

CURRENT PROJECT CONTEXT:
{files_block}

AI ANALYSIS:
- Complexity: {ai.get('complexity', 'Unknown')}/10
- Risk Level: {ai.get('riskLevel', 'medium')}
- Recommendations: {recommendations}

{OUTPUT_FORMAT_RULES}

RESPONSE FORMAT (REQUIRED):
{{
  "analysis": "What I understood about this task",
  "files": {{"filename.ext": "COMPLETE file content with all changes applied"}},
  "summary": "What was implemented and why",
  "verification": "How to verify the changes work"
}}
""".strip()
    return prompt


def build_analysis_prompt(
    project_content: Mapping[str, str],
    *,
    metrics: Optional[Dict[str, Any]] = None,
    file_char_budget: int = 1000,
) -> str:
    metrics = metrics or {}
    files_block = format_project_files(project_content, file_char_budget, marker="...")
    prompt = f"""
Analyze this project for potential issues and improvements:

Project Files:
{files_block}

Performance Metrics:
- Load Time: {metrics.get('loadTime', 'Unknown')}ms
- JS Errors: {metrics.get('jsErrors', 0)}
- CSS Errors: {metrics.get('cssErrors', 0)}

Please identify:
1. Code quality issues
2. Performance problems
3. Accessibility concerns
4. Security vulnerabilities
5. Missing best practices

Return ONLY valid JSON in this format:
{{
  "suggestions": [
    {{"issue": "Description of the issue", "severity": "low|medium|high", "fix": "How to fix it", "affectedFiles": ["file1", "file2"]}}
  ]
}}

Focus on actionable improvements that can be automatically implemented.
""".strip()
    return prompt


def build_fix_prompt(issue: Mapping[str, Any], project_content: Mapping[str, str]) -> str:
    affected = list(issue.get("affectedFiles") or [])
    current = "\n".join(
        f"=== {path} ===\n{project_content.get(path, 'File not found')}\n" for path in affected
    ) or "(no affected files listed)"
    prompt = f"""
Fix this specific issue in the code:

Issue: {issue.get('issue', '')}
Suggested Fix: {issue.get('fix', '')}
Affected Files: {', '.join(affected) or 'None specified'}

Current code for affected files:
{current}

{OUTPUT_FORMAT_RULES}

Return only the fixed code for each file in JSON format:
{{"files": {{"filename1": "fixed content", "filename2": "fixed content"}}}}

Make minimal changes to fix only the specific issue mentioned.
""".strip()
    return prompt
