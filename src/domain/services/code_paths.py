"""Code path heuristics - file paths, languages and test-file naming."""

import re
from pathlib import PurePosixPath

UNKNOWN_LANGUAGE = "unknown"

_FILE_PATH_RE = re.compile(r"File Path: ([^\n]+)")

EXTENSION_LANGUAGES = {
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".java": "java",
}

# Checked in order: first language with a matching keyword wins.
LANGUAGE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "kotlin",
        (r"\bkotlin\b", r"\.kts?\b", r"\bfun\s+\w+\s*\(", r"\bval\s+\w+\s*[:=]", r"\bdata class\b",
         r"\bcompanion object\b", r"\bsuspend fun\b"),
    ),
    (
        "typescript",
        (r"\btypescript\b", r"\.tsx?\b", r":\s*(?:string|number|boolean)\b", r"\binterface\s+\w+",
         r"\bexport type\b"),
    ),
    (
        "javascript",
        (r"\bjavascript\b", r"\.jsx?\b", r"\brequire\(", r"\bmodule\.exports\b", r"=>",
         r"\bconst\s+\w+\s*="),
    ),
    (
        "java",
        (r"\bjava\b", r"\.java\b", r"\bpublic class\b", r"\bpublic static void\b", r"\bsystem\.out\b",
         r"@override\b"),
    ),
)

_LANGUAGE_RES = tuple(
    (language, re.compile("|".join(patterns), re.IGNORECASE)) for language, patterns in LANGUAGE_KEYWORDS
)

TEST_KEYWORDS = ("test", "spec", "테스트")

_KOTLIN_TEST_TEMPLATES = (
    "{name}.kt",
    "{name}Test.kt",
    "{name}IntegrationTest.kt",
    "{name}UnitTest.kt",
    "Test{name}.kt",
    "{name}ServiceTest.kt",
    "{name}RepositoryTest.kt",
    "{name}ControllerTest.kt",
)

_SCRIPT_TEST_TEMPLATES = (
    "{name}.spec.ts",
    "{name}.test.ts",
    "{name}Test.ts",
    "Test{name}.ts",
    "{name}.spec.js",
    "{name}.test.js",
    "{name}Test.js",
    "Test{name}.js",
)

_JAVA_TEST_TEMPLATES = (
    "{name}Test.java",
    "{name}IT.java",
    "{name}IntegrationTest.java",
    "{name}UnitTest.java",
    "Test{name}.java",
)

TEST_FILE_TEMPLATES: dict[str, tuple[str, ...]] = {
    "kotlin": _KOTLIN_TEST_TEMPLATES,
    "typescript": _SCRIPT_TEST_TEMPLATES,
    "javascript": _SCRIPT_TEST_TEMPLATES,
    "java": _JAVA_TEST_TEMPLATES,
}

# Unknown language: every convention, script first, then Kotlin, then Java.
_ALL_TEST_TEMPLATES = (
    "{name}.spec.ts",
    "{name}.spec.js",
    "{name}Test.ts",
    "{name}Test.js",
    "{name}.test.ts",
    "{name}.test.js",
    "Test{name}.ts",
    "Test{name}.js",
    *_KOTLIN_TEST_TEMPLATES[:5],
    *_JAVA_TEST_TEMPLATES,
)


def extract_file_path(text: str) -> str | None:
    """Return the value of a 'File Path: <value>' marker line, if any."""
    match = _FILE_PATH_RE.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None


def file_name(path: str) -> str:
    """Base name of a path ('src/Foo.ts' -> 'Foo.ts')."""
    return PurePosixPath(path.replace("\\", "/")).name


def file_stem(path: str) -> str:
    """Base name without its last extension ('src/Foo.spec.ts' -> 'Foo.spec')."""
    name = file_name(path)
    suffix = PurePosixPath(name).suffix
    return name[: len(name) - len(suffix)] if suffix else name


def language_for_extension(extension: str) -> str:
    """Map an extension (with leading dot) to a language name."""
    return EXTENSION_LANGUAGES.get(extension.lower(), UNKNOWN_LANGUAGE)


def language_for_path(path: str) -> str:
    """Language of a file path, judged by its extension."""
    return language_for_extension(PurePosixPath(file_name(path)).suffix)


def language_from_keywords(text: str) -> str:
    """Guess a language from prompt keywords."""
    for language, pattern in _LANGUAGE_RES:
        if pattern.search(text):
            return language
    return UNKNOWN_LANGUAGE


def has_test_keywords(text: str) -> bool:
    """True when the prompt talks about tests."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in TEST_KEYWORDS)


def probable_test_file_names(path: str) -> list[str]:
    """Probable test-file names for a source path, most likely first."""
    name = file_stem(path)
    templates = TEST_FILE_TEMPLATES.get(language_for_path(path), _ALL_TEST_TEMPLATES)
    return [template.format(name=name) for template in templates]


def name_distance(first: str, second: str) -> int:
    """Cheap file-name distance; lower is more similar.

    0 for a case-insensitive match, 1 when one name contains the other,
    otherwise the count of same-position mismatches over the shorter length
    plus the length difference. Not an edit distance.
    """
    a = first.lower()
    b = second.lower()
    if a == b:
        return 0
    if a in b or b in a:
        return 1
    distance = sum(1 for x, y in zip(a, b) if x != y)
    return distance + abs(len(a) - len(b))


def starts_with_import(content: str) -> bool:
    """True when the first non-blank line of a chunk is an import statement."""
    for line in content.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped.startswith("import ")
    return False
