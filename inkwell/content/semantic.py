"""Heuristic text mining: keywords, technology entities, topics and readability.

Every function takes plain text (HTML already stripped) and is deterministic.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Final

_NON_WORD_RE = re.compile(r"[^\w\s]")
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_VOWEL_RE = re.compile(r"[aeiouáéíóúü]", re.IGNORECASE)
_DIPHTHONG_RE = re.compile(r"[aeiouáéíóúü]{2}", re.IGNORECASE)
_CONCEPT_RE = re.compile(r"[A-ZÁÉÍÓÚÑ][a-záéíóúñü]+(?:\s+[A-ZÁÉÍÓÚÑ][a-záéíóúñü]+)*")

STOPWORDS: Final[frozenset[str]] = frozenset(
  {
    # Spanish
    "el", "la", "de", "que", "y", "a", "en", "un", "ser", "se", "no", "haber", "por", "con", "su", "para",
    "como", "estar", "tener", "le", "lo", "todo", "pero", "más", "hacer", "o", "poder", "decir", "este",
    "ir", "otro", "ese", "si", "me", "ya", "ver", "porque", "dar", "cuando", "él", "muy", "sin", "vez",
    "mucho", "saber", "qué", "sobre", "mi", "alguno", "mismo", "yo", "también", "hasta", "año", "dos",
    "querer", "entre", "así", "primero", "desde", "grande", "eso", "ni", "nos", "llegar", "pasar", "tiempo",
    "ella", "sí", "día", "uno", "bien", "poco", "deber", "entonces", "poner", "cosa", "tanto", "hombre",
    "parecer", "nuestro", "tan", "donde", "ahora", "parte", "después", "vida", "quedar", "siempre", "creer",
    "hablar", "llevar", "dejar", "nada", "cada", "seguir", "menos", "nuevo", "encontrar", "algo", "solo",
    "estos", "trabajar", "primera", "puede", "todos", "ante", "bajo", "cabe", "contra", "durante",
    "mediante", "según", "siendo", "tal", "tras", "cual", "cuales", "quien", "quienes", "esta", "están",
    "pueden", "otros", "otras", "esto", "estas", "sus", "una", "unos", "unas", "del", "los", "las",
    # English
    "about", "also", "been", "being", "both", "could", "does", "each", "even", "from", "have", "here",
    "into", "just", "like", "make", "more", "most", "much", "must", "only", "other", "over", "same",
    "should", "some", "such", "than", "that", "their", "them", "then", "there", "these", "they", "this",
    "those", "very", "want", "were", "what", "when", "where", "which", "while", "will", "with", "would",
    "your", "yours", "because", "before", "after", "between", "through", "without", "within", "using",
  }
)

TECHNOLOGIES: Final[tuple[str, ...]] = (
  "javascript", "typescript", "python", "java", "react", "vue", "angular", "node", "express", "mongodb",
  "postgresql", "sql", "api", "rest", "graphql", "html", "css", "sass", "webpack", "docker", "kubernetes",
  "aws", "azure", "git", "github", "vscode", "npm", "yarn", "redux", "nextjs", "fastapi", "django",
)

TOPIC_DICTIONARY: Final[dict[str, tuple[str, ...]]] = {
  "web-development": ("web development", "desarrollo", "web", "frontend", "backend", "fullstack", "html", "css", "javascript"),
  "programming": ("code", "código", "programming", "programación", "algorithm", "algoritmo", "function", "función", "variable", "class", "clase", "object", "objeto"),
  "databases": ("database", "base de datos", "sql", "mongodb", "postgresql", "query", "table", "tabla", "collection", "colección", "model", "modelo"),
  "design": ("design", "diseño", "ui", "ux", "interface", "interfaz", "experience", "experiencia", "user", "usuario", "visual"),
  "devops": ("devops", "docker", "kubernetes", "ci/cd", "deploy", "server", "servidor", "cloud"),
  "security": ("security", "seguridad", "authentication", "autenticación", "authorization", "autorización", "encryption", "encriptación", "token", "jwt"),
  "testing": ("test", "testing", "prueba", "qa", "unit", "unitario", "integration", "integración"),
  "api": ("api", "rest", "endpoint", "request", "response", "http", "json"),
}


@dataclass(frozen=True)
class Keyword:
  word: str
  frequency: int
  relevance: float
  score: float


@dataclass(frozen=True)
class Entity:
  name: str
  occurrences: int


@dataclass(frozen=True)
class Entities:
  technologies: list[Entity]
  concepts: list[Entity]


@dataclass(frozen=True)
class Topic:
  name: str
  weight: int
  confidence: float


@dataclass(frozen=True)
class Readability:
  reading_level: str
  flesch_score: float
  word_count: int
  sentence_count: int
  avg_word_length: float
  avg_sentence_length: float
  avg_syllables_per_word: float


@dataclass(frozen=True)
class KeywordDensity:
  keyword: str
  frequency: int
  density: str
  is_optimal: bool


def _tokenize(text: str) -> list[str]:
  return _NON_WORD_RE.sub(" ", text.lower()).split()


def _word_pattern(term: str) -> re.Pattern[str]:
  """Match a term only as a whole word or phrase."""
  return re.compile(rf"(?<!\w){re.escape(term)}(?!\w)", re.IGNORECASE)


def _relevance(word: str, frequency: int, total_words: int) -> float:
  tf = frequency / total_words
  # Longer words tend to be more specific.
  length_bonus = min(len(word) / 15, 1)
  common_penalty = 0.5 if frequency > total_words * 0.05 else 1
  return tf * 100 * length_bonus * common_penalty


def extract_keywords(text: str, max_keywords: int = 20) -> list[Keyword]:
  """Rank words longer than three characters by frequency weighted by relevance."""
  words = [word for word in _tokenize(text) if len(word) > 3]
  if not words:
    return []

  counts = Counter(word for word in words if word not in STOPWORDS)
  keywords = []
  for word, count in counts.items():
    relevance = _relevance(word, count, len(words))
    keywords.append(Keyword(word=word, frequency=count, relevance=relevance, score=count * relevance))

  keywords.sort(key=lambda keyword: keyword.score, reverse=True)
  return keywords[:max_keywords]


def extract_entities(text: str) -> Entities:
  """Detect known technology names and repeated capitalised concepts."""
  technologies = []
  for tech in TECHNOLOGIES:
    occurrences = len(_word_pattern(tech).findall(text))
    if occurrences:
      technologies.append(Entity(name=tech, occurrences=occurrences))

  concept_counts: Counter[str] = Counter()
  for match in _CONCEPT_RE.finditer(text):
    start = match.start()
    # Sentence-initial capitals are not concepts.
    if start == 0 or text[max(0, start - 2) : start] == ". ":
      continue
    concept_counts[match.group(0)] += 1

  concepts = [Entity(name=name, occurrences=count) for name, count in concept_counts.items() if count > 1 and len(name) > 3]
  return Entities(technologies=technologies, concepts=concepts)


def extract_topics(text: str) -> list[Topic]:
  """Score each topic cluster by whole-word hits of its vocabulary."""
  topics = []
  for name, vocabulary in TOPIC_DICTIONARY.items():
    weight = sum(len(_word_pattern(term).findall(text)) for term in vocabulary)
    if weight > 0:
      topics.append(Topic(name=name, weight=weight, confidence=min(weight / 10, 1)))

  topics.sort(key=lambda topic: topic.weight, reverse=True)
  return topics[:5]


def count_syllables(text: str) -> int:
  """Approximate syllables as vowels minus half the adjacent vowel pairs."""
  total = 0.0
  for word in text.lower().split():
    total += len(_VOWEL_RE.findall(word)) - len(_DIPHTHONG_RE.findall(word)) * 0.5
  return max(1, int(total + 0.5))


def reading_level_for(flesch_score: float) -> str:
  if flesch_score >= 80:
    return "very-easy"
  if flesch_score >= 70:
    return "easy"
  if flesch_score >= 60:
    return "fairly-easy"
  if flesch_score >= 50:
    return "intermediate"
  if flesch_score >= 30:
    return "difficult"
  return "very-difficult"


def analyze_readability(text: str) -> Readability:
  """Compute a Flesch reading-ease estimate and the averages it is built from."""
  words = text.split()
  word_count = len(words)
  if word_count == 0:
    return Readability(reading_level="intermediate", flesch_score=0.0, word_count=0, sentence_count=0, avg_word_length=0.0, avg_sentence_length=0.0, avg_syllables_per_word=0.0)

  # Text without terminal punctuation still reads as one sentence.
  sentence_count = max(1, len(_SENTENCE_RE.findall(text)))
  avg_word_length = sum(len(word) for word in words) / word_count
  avg_sentence_length = word_count / sentence_count
  avg_syllables = count_syllables(text) / word_count

  flesch = 206.835 - (1.015 * avg_sentence_length) - (84.6 * avg_syllables)
  return Readability(
    reading_level=reading_level_for(flesch),
    flesch_score=max(0.0, min(100.0, flesch)),
    word_count=word_count,
    sentence_count=sentence_count,
    avg_word_length=round(avg_word_length, 1),
    avg_sentence_length=round(avg_sentence_length, 1),
    avg_syllables_per_word=round(avg_syllables, 1),
  )


def analyze_keyword_density(text: str, max_keywords: int = 10) -> list[KeywordDensity]:
  """Report how much of the text each top keyword occupies; above 3% is flagged."""
  total_words = len(text.split())
  if total_words == 0:
    return []
  return [
    KeywordDensity(keyword=keyword.word, frequency=keyword.frequency, density=f"{keyword.frequency / total_words * 100:.2f}%", is_optimal=keyword.frequency / total_words <= 0.03)
    for keyword in extract_keywords(text, max_keywords)
  ]
