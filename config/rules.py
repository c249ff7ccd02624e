"""Static validation rules, rewrite deny-lists and naming tables."""

import re

# Line-level checks run by the static validator. Each entry:
# (pattern_regex, severity, category, message, suggestion)
VALIDATION_PATTERNS = [
    (
        re.compile(r""":\s*any\b(?!\w)"""),
        "warning",
        "type",
        "Explicit 'any' type annotation",
        "Use a concrete type or let the type be inferred",
    ),
    (
        re.compile(r"""\bas\s+any\b"""),
        "warning",
        "type",
        "Cast to 'any' disables type checking",
        "Remove the cast or cast to a concrete type",
    ),
    (
        re.compile(r"""\b(?:useState|useReducer|useRef|useMemo|useCallback|useContext|createContext)\s*<"""),
        "warning",
        "type",
        "Generic parameter on a hook call is not supported by the preview runtime",
        "Drop the type parameter and type the initial value instead",
    ),
    (
        re.compile(r"""^\s*import\s[^;]*?from\s+['"]\./"""),
        "info",
        "dependency",
        "Relative import will not resolve in the single-file preview",
        "Inline the imported code or reference it by package name",
    ),
    (
        re.compile(r"""^\s*import\s+['"]\./"""),
        "info",
        "dependency",
        "Relative side-effect import will not resolve in the single-file preview",
        "Inline the imported stylesheet or module",
    ),
    (
        re.compile(r"""\bconsole\.(?:log|debug|info|trace)\s*\("""),
        "info",
        "performance",
        "Leftover diagnostic console call",
        "Remove debug logging before shipping",
    ),
    (
        re.compile(r"""^\s*debugger\s*;?\s*$"""),
        "warning",
        "performance",
        "Leftover debugger statement",
        "Remove the debugger statement",
    ),
    (
        re.compile(r"""\bfetch\s*\(\s*`"""),
        "warning",
        "contract",
        "Template literal inside fetch() is not evaluated by the preview runtime",
        "Build the URL with string concatenation",
    ),
    (
        re.compile(r"""\b(?:TODO|FIXME)\b|\bnot implemented\b""", re.IGNORECASE),
        "warning",
        "contract",
        "Placeholder left in generated code",
        "Implement the missing logic",
    ),
]

# Call sites whose type parameters are stripped by the rewriter.
STATEFUL_PRIMITIVES = [
    "useState", "useReducer", "useMemo", "useCallback", "useRef",
    "useContext", "createContext",
]

# Type annotation patterns relaxed by the rewriter: (regex, replacement).
TYPE_RELAX_PATTERNS = [
    (re.compile(r"""\s+as\s+unknown\s+as\s+[A-Za-z_$][\w$.]*(?:<[^<>()]*>)?(?:\[\])*"""), ""),
    (re.compile(r"""\s+as\s+any\b"""), ""),
    (re.compile(r"""(?<=[\w$)\]])\s*:\s*any(?:\[\])*(?=\s*[,)=;{])"""), ""),
    (re.compile(r""":\s*React\.FC(?:<[^<>]*(?:<[^<>]*>[^<>]*)*>)?(?=\s*=)"""), ""),
]

# Console methods treated as dead diagnostics. error/warn stay, they usually
# live in catch blocks.
DIAGNOSTIC_CALLS = ["log", "debug", "info", "trace"]

# Packages not available in the preview sandbox. Subpath imports of these
# (e.g. "lucide-react/icons") are stripped too.
FORBIDDEN_PACKAGES = [
    "framer-motion",
    "lucide-react",
    "react-icons",
    "@heroicons/react",
    "styled-components",
    "@emotion/react",
    "@emotion/styled",
    "@mui/material",
    "@mui/icons-material",
    "antd",
    "axios",
    "classnames",
    "clsx",
    "react-router-dom",
]

# Artifact names that are replaced by the detected entity.
GENERIC_NAMES = ["Item", "Component", "Element", "Widget"]

# Identifier suffixes renamed together with a generic name (ItemProps -> ProductProps).
RENAME_SUFFIXES = ["Props", "Types", "Type", "State", "Mock", "Styles"]

DEFAULT_ENTITY = "Component"

# Request keyword -> canonical entity name, checked in order.
ENTITY_KEYWORDS = [
    ("button", "Button"), ("card", "Card"), ("modal", "Modal"),
    ("dialog", "Dialog"), ("form", "Form"), ("list", "List"),
    ("table", "Table"), ("menu", "Menu"), ("navbar", "Navbar"),
    ("sidebar", "Sidebar"), ("footer", "Footer"), ("header", "Header"),
    ("input", "Input"), ("textarea", "Textarea"), ("select", "Select"),
    ("checkbox", "Checkbox"), ("radio", "Radio"), ("toggle", "Toggle"),
    ("switch", "Switch"), ("slider", "Slider"), ("dropdown", "Dropdown"),
    ("tooltip", "Tooltip"), ("popover", "Popover"), ("alert", "Alert"),
    ("notification", "Notification"), ("badge", "Badge"), ("avatar", "Avatar"),
    ("image", "Image"), ("icon", "Icon"), ("spinner", "Spinner"),
    ("loader", "Loader"), ("progress", "Progress"), ("stepper", "Stepper"),
    ("tabs", "Tabs"), ("accordion", "Accordion"), ("carousel", "Carousel"),
    ("pagination", "Pagination"), ("breadcrumb", "Breadcrumb"), ("chip", "Chip"),
    ("tag", "Tag"), ("divider", "Divider"),
    ("product", "Product"), ("user", "User"), ("task", "Task"),
    ("todo", "Todo"), ("blog", "Post"), ("post", "Post"), ("order", "Order"),
    ("customer", "Customer"), ("invoice", "Invoice"), ("event", "Event"),
]

# Capitalized words that never name an entity (sentence-initial verbs etc.).
ENTITY_STOPWORDS = {
    "a", "an", "the", "i", "build", "create", "make", "generate", "write",
    "design", "implement", "develop", "add", "please", "can", "could", "you",
    "need", "want", "with", "using", "for", "and", "simple", "new", "my",
}

# Request phrases -> feature labels used by prompt analysis.
FEATURE_KEYWORDS = [
    (("auth", "login", "signup", "sign up", "register", "authentication"), "Authentication"),
    (("crud", "edit", "delete", "update", "manage"), "CRUD Operations"),
    (("dashboard", "analytics", "chart", "report"), "Dashboard"),
    (("task", "todo", "kanban"), "Task Management"),
    (("user", "profile", "account", "team"), "User Management"),
]

DEFAULT_FEATURE = "Core Functionality"

# Request keyword -> database kind, checked in order.
DATABASE_HINTS = [
    ("prisma", "prisma"),
    ("postgres", "postgresql"),
    ("mongo", "mongodb"),
    ("mysql", "mysql"),
    ("sqlite", "sqlite"),
    ("database", "postgresql"),
    ("db", "postgresql"),
]
