"""
Pytest configuration and shared fixtures for BookForge markup tests.
"""
import json
import sys
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.epub.xhtml_transpiler import TranspilerConfig, XhtmlTranspiler
from core.latex.sanitizer import LatexSanitizer, SanitizerConfig


# ============================================================================
# Fixtures: Sample Data
# ============================================================================

SAMPLE_CHAPTER = r"""```latex
\documentclass{book}
\usepackage{booktabs}
\begin{document}
\chapter{Getting Started}

Every project begins with a plan\footnote{See the appendix for templates.}. Keep it \textbf{short} and \emph{honest}.

\section{Why Plans Fail}

Most plans fail for three reasons:
\begin{itemize}
\item They are too long
\item They ignore risk
\item Nobody reads them
\end{itemize}

\begin{tipbox}{Rule of thumb}
One page is enough. R\&D budgets are the exception.
\end{tipbox}

\begin{table}[h]
\centering
\caption{Plan sizes}
\begin{tabularx}{\textwidth}{lX}
\toprule
\textbf{Size} & \textbf{Outcome} \\
\midrule
1 page & Read \\
10 pages & Skimmed \\
\bottomrule
\end{tabularx}
\end{table}

QUALITY CHECKLIST: did you cover everything?
\begin{keyinsight}{Remember}
Plans are for people\footnote{Not for \textit{filing cabinets}.}.
\end{document}
```"""


SAMPLE_OUTLINE = {
    "title": "Planning for Humans",
    "chapters": [
        {
            "number": 1,
            "title": "Getting Started",
            "description": "Why short plans win, with a \"one page\" rule",
            "sections": ["Why Plans Fail", "Rule of Thumb"],
            "estimatedWords": 3200,
            "hasTable": True,
            "image": None,
        },
        {
            "number": 2,
            "title": "Risk – the part nobody reads",
            "description": "Listing risks\nwithout drowning in them",
            "sections": [],
            "estimatedWords": -1.5e3,
            "hasTable": False,
            "image": None,
        },
    ],
}


@pytest.fixture
def sample_chapter_latex() -> str:
    """Raw model output for one chapter: fenced, with preamble, echo and an unclosed box."""
    return SAMPLE_CHAPTER


@pytest.fixture
def sample_outline() -> dict:
    """Parsed chapter outline."""
    return json.loads(json.dumps(SAMPLE_OUTLINE))


@pytest.fixture
def sample_outline_json() -> str:
    """Chapter outline as the generator would emit it."""
    return json.dumps(SAMPLE_OUTLINE, indent=2, ensure_ascii=False)


# ============================================================================
# Fixtures: Components
# ============================================================================

@pytest.fixture
def sanitizer() -> LatexSanitizer:
    """Sanitizer with default configuration."""
    return LatexSanitizer(SanitizerConfig())


@pytest.fixture
def transpiler() -> XhtmlTranspiler:
    """Transpiler with default configuration."""
    return XhtmlTranspiler(TranspilerConfig())


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)
