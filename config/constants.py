"""
Centralized constants for the BookForge markup engine.
Vocabulary tables, label defaults and logging values live here.
"""

# ===========================================
# LATEX REGION VOCABULARY
# ===========================================
# Environments the sanitizer knows how to balance. Anything else passes through.
CALLOUT_ENVIRONMENTS = (
    'tipbox',
    'keyinsight',
    'warningbox',
    'examplebox',
)

STRUCTURAL_ENVIRONMENTS = (
    'itemize',
    'enumerate',
    'quote',
    'table',
    'tabularx',
    'tabular',
    'center',
    'figure',
    'minipage',
    'description',
    'wrapfigure',
)

KNOWN_ENVIRONMENTS = CALLOUT_ENVIRONMENTS + STRUCTURAL_ENVIRONMENTS

# (outer, inner): inner is conventionally nested inside outer
NESTING_PAIRS = (
    ('table', 'tabularx'),
    ('table', 'tabular'),
    ('figure', 'center'),
    ('table', 'center'),
)

# ===========================================
# SANITIZER
# ===========================================
MAX_BLANK_LINES = 2                   # 3+ blank lines collapse to this many
MAX_SANITIZE_ROUNDS = 4               # pipeline reruns until its output stops changing

# Literal line prefixes the generator sometimes copies out of its prompt
PROMPT_ECHO_PREFIXES = (
    'QUALITY CHECKLIST',
    'WORD COUNT TARGET',
    'SECTIONS TO WRITE',
    'RULES FOR CONTINUATION',
    'Begin LaTeX output now',
)

# Prefixes following a leading warning sign on echoed lines
PROMPT_WARNING_PREFIXES = (
    'Hard limits',
    'STRICT MAXIMUM',
    'COMPLETE every',
    'CONTINUITY',
    'THIS IS THE FINAL',
    'ENSURE every',
    'STOP writing',
    'Close every opened',
)

# ===========================================
# TRANSPILER
# ===========================================
DEFAULT_LANGUAGE = 'en'
FOOTNOTE_BACKLINK = '↩'          # ↩

CALLOUT_CLASSES = {
    'tipbox': 'box-tip',
    'keyinsight': 'box-key',
    'warningbox': 'box-warn',
    'examplebox': 'box-example',
}

CALLOUT_ICONS = {
    'tipbox': '\U0001f4a1',           # 💡
    'keyinsight': '\U0001f511',       # 🔑
    'warningbox': '⚠️',     # ⚠️
    'examplebox': '\U0001f4cb',       # 📋
}

HEADING_LEVELS = (
    ('chapter', 'h1', 'chapter-title'),
    ('section', 'h2', 'section-title'),
    ('subsection', 'h3', 'subsection-title'),
    ('subsubsection', 'h4', 'subsubsection-title'),
)

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = ''                         # empty: console only
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5
