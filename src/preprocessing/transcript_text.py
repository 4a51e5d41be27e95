"""
Transcript text normalizer.

Tokenizes, stems and filters transcript components, aggregates them into
per-document term counts, and builds the pruned document-term matrix
consumed by the topic model.

Usage:
    from src.preprocessing.transcript_text import TranscriptTextNormalizer

    normalizer = TranscriptTextNormalizer()
    term_counts = normalizer.aggregate_term_counts(components)
    dtm = normalizer.build_document_term_matrix(term_counts)
    dtm.save("data/interim/dtm")
"""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Hashable, Iterable, List, Optional

import pandas as pd
from gensim import corpora, matutils
from gensim.parsing.preprocessing import (
    STOPWORDS as GENSIM_STOPWORDS,
    preprocess_string,
    strip_multiple_whitespaces,
    strip_numeric,
    strip_punctuation,
    strip_tags,
)
from nltk.corpus import stopwords as nltk_stopwords
from nltk.stem import PorterStemmer

from src.config import settings
from src.utils.frames import require_columns
from .constants import (
    CALL_STOPWORDS,
    COL_COMPONENT_TEXT,
    COL_COMPONENT_TYPE,
    COL_TRANSCRIPT_ID,
    COMPONENT_REQUIRED_COLUMNS,
    DIGIT_PATTERN,
    DTM_CORPUS_FILENAME,
    DTM_DICTIONARY_FILENAME,
    DTM_DOCUMENT_IDS_FILENAME,
    URL_PATTERN,
)

logger = logging.getLogger(__name__)


def _json_id(doc_id):
    # numpy scalars are not JSON serializable
    return doc_id.item() if hasattr(doc_id, "item") else doc_id


class DocumentTermMatrix:
    """
    Pruned bag-of-words corpus aligned with transcript ids.

    Attributes:
        dictionary: gensim Dictionary (term <-> id, document frequencies)
        corpus: One bag-of-words list of (term_id, count) per document
        document_ids: Transcript id of each corpus row
    """

    def __init__(
        self,
        dictionary: corpora.Dictionary,
        corpus: List[List[tuple]],
        document_ids: List[Hashable],
    ):
        if len(corpus) != len(document_ids):
            raise ValueError(
                f"Corpus has {len(corpus)} documents but {len(document_ids)} ids"
            )
        self.dictionary = dictionary
        self.corpus = corpus
        self.document_ids = list(document_ids)

    def __len__(self) -> int:
        return len(self.corpus)

    @property
    def num_terms(self) -> int:
        return len(self.dictionary)

    def subset(self, positions: Iterable[int]) -> "DocumentTermMatrix":
        """Row subset sharing the same dictionary."""
        positions = list(positions)
        return DocumentTermMatrix(
            self.dictionary,
            [self.corpus[i] for i in positions],
            [self.document_ids[i] for i in positions],
        )

    def to_sparse(self):
        """Return the matrix as a scipy CSC matrix of shape (terms, documents)."""
        return matutils.corpus2csc(
            self.corpus,
            num_terms=self.num_terms,
            num_docs=len(self.corpus),
        )

    def save(self, directory: Path | str) -> Path:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        self.dictionary.save(str(directory / DTM_DICTIONARY_FILENAME))
        corpora.MmCorpus.serialize(str(directory / DTM_CORPUS_FILENAME), self.corpus)
        with open(directory / DTM_DOCUMENT_IDS_FILENAME, 'w', encoding='utf-8') as f:
            json.dump([_json_id(doc_id) for doc_id in self.document_ids], f)

        logger.info(f"Saved document-term matrix ({len(self)} docs) to {directory}")
        return directory

    @classmethod
    def load(cls, directory: Path | str) -> "DocumentTermMatrix":
        directory = Path(directory)
        if not directory.exists():
            raise FileNotFoundError(f"Document-term matrix not found: {directory}")

        dictionary = corpora.Dictionary.load(str(directory / DTM_DICTIONARY_FILENAME))
        corpus = [list(doc) for doc in corpora.MmCorpus(str(directory / DTM_CORPUS_FILENAME))]
        corpus = [[(int(term_id), int(count)) for term_id, count in doc] for doc in corpus]
        with open(directory / DTM_DOCUMENT_IDS_FILENAME, 'r', encoding='utf-8') as f:
            document_ids = json.load(f)

        return cls(dictionary, corpus, document_ids)


class TranscriptTextNormalizer:
    """
    Text normalizer for earnings-call transcript components.

    Pipeline per component:
    1. Drop operator (noise) components
    2. Lowercase, strip tags/punctuation/numerics, collapse whitespace
    3. Remove URLs, stopwords and tokens containing digits
    4. Keep tokens within the configured length bounds
    5. Porter-stem
    """

    def __init__(
        self,
        min_word_length: Optional[int] = None,
        max_word_length: Optional[int] = None,
        excluded_component_types: Optional[List[str]] = None,
        use_call_stopwords: Optional[bool] = None,
        custom_stopwords: Optional[List[str]] = None,
    ):
        config = settings.transcripts
        self.min_word_length = min_word_length or config.min_word_length
        self.max_word_length = max_word_length or config.max_word_length
        excluded = (
            excluded_component_types
            if excluded_component_types is not None
            else config.excluded_component_types
        )
        self.excluded_component_types = {t.lower() for t in excluded}
        if use_call_stopwords is None:
            use_call_stopwords = settings.topic_modeling.preprocessing.use_call_stopwords

        self.stopwords = self._load_stopwords(use_call_stopwords, custom_stopwords)
        self.stemmer = PorterStemmer()

    def tokenize(self, text: Optional[str]) -> List[str]:
        """
        Normalize one piece of text into stemmed tokens.

        Args:
            text: Raw component text

        Returns:
            List of stemmed tokens (may be empty)
        """
        if not isinstance(text, str) or not text.strip():
            return []

        text = URL_PATTERN.sub(" ", text)
        filters = [
            lambda x: x.lower(),
            strip_tags,
            strip_punctuation,
            strip_multiple_whitespaces,
            strip_numeric,
        ]
        tokens = preprocess_string(text, filters)

        stems = []
        for token in tokens:
            if token in self.stopwords or DIGIT_PATTERN.search(token):
                continue
            if not self.min_word_length <= len(token) <= self.max_word_length:
                continue
            stem = self.stemmer.stem(token)
            if stem in self.stopwords:
                continue
            stems.append(stem)
        return stems

    def aggregate_term_counts(self, components: pd.DataFrame) -> Dict[Hashable, Counter]:
        """
        Sum term counts over every kept component of each transcript.

        Args:
            components: Frame with transcript_id, component_type, component_text

        Returns:
            Mapping of transcript_id -> Counter of stemmed terms. Transcripts
            whose components all tokenize to nothing are omitted.
        """
        require_columns(components, COMPONENT_REQUIRED_COLUMNS, "transcript components")

        component_types = components[COL_COMPONENT_TYPE].astype("string").str.strip().str.lower()
        kept = components[~component_types.isin(self.excluded_component_types).fillna(False)]
        logger.info(
            f"Tokenizing {len(kept):,} components "
            f"({len(components) - len(kept):,} operator/noise components dropped)"
        )

        term_counts: Dict[Hashable, Counter] = {}
        for transcript_id, text in zip(kept[COL_TRANSCRIPT_ID], kept[COL_COMPONENT_TEXT]):
            tokens = self.tokenize(text)
            if not tokens:
                continue
            term_counts.setdefault(transcript_id, Counter()).update(tokens)

        logger.info(f"Aggregated term counts for {len(term_counts):,} transcripts")
        return term_counts

    def build_document_term_matrix(
        self,
        term_counts: Dict[Hashable, Counter],
        no_below: Optional[int] = None,
        no_above: Optional[float] = None,
        keep_n: Optional[int] = None,
    ) -> DocumentTermMatrix:
        """
        Build the pruned document-term matrix.

        Terms appearing in fewer than ``no_below`` documents or in more than
        ``no_above`` (fraction) of documents are removed; at most ``keep_n``
        terms survive. Documents left empty are dropped.

        Raises:
            ValueError: If no documents are given or none survive pruning
        """
        if not term_counts:
            raise ValueError("No documents to build a document-term matrix from")

        prep = settings.topic_modeling.preprocessing
        no_below = prep.no_below if no_below is None else no_below
        no_above = prep.no_above if no_above is None else no_above
        keep_n = prep.keep_n if keep_n is None else keep_n

        document_ids = list(term_counts.keys())
        dictionary = corpora.Dictionary()
        # Document frequency only needs each document's vocabulary
        dictionary.add_documents([list(term_counts[doc_id].keys()) for doc_id in document_ids])
        vocab_before = len(dictionary)

        dictionary.filter_extremes(no_below=no_below, no_above=no_above, keep_n=keep_n)
        logger.info(
            f"Vocabulary pruned {vocab_before:,} -> {len(dictionary):,} terms "
            f"(no_below={no_below}, no_above={no_above}, keep_n={keep_n})"
        )

        corpus = []
        kept_ids = []
        for doc_id in document_ids:
            bow = sorted(
                (dictionary.token2id[term], count)
                for term, count in term_counts[doc_id].items()
                if term in dictionary.token2id
            )
            if bow:
                corpus.append(bow)
                kept_ids.append(doc_id)

        if not corpus:
            raise ValueError("No documents left after pruning the vocabulary")
        if len(kept_ids) < len(document_ids):
            logger.warning(
                f"{len(document_ids) - len(kept_ids):,} documents empty after pruning; dropped"
            )

        return DocumentTermMatrix(dictionary, corpus, kept_ids)

    def _load_stopwords(
        self,
        use_call_stopwords: bool,
        custom_stopwords: Optional[List[str]] = None,
    ) -> set:
        """
        Load stopword list (gensim + NLTK English + call boilerplate).

        Both surface forms and their stems are included so filtering works
        before and after stemming.
        """
        stopwords_set = set(GENSIM_STOPWORDS)

        try:
            stopwords_set.update(nltk_stopwords.words('english'))
        except LookupError:
            logger.warning(
                "NLTK stopwords not downloaded. "
                "Run: python -m nltk.downloader stopwords"
            )

        if use_call_stopwords:
            stopwords_set.update(CALL_STOPWORDS)
        if custom_stopwords:
            stopwords_set.update(w.lower() for w in custom_stopwords)

        stemmer = PorterStemmer()
        if use_call_stopwords:
            stopwords_set.update(stemmer.stem(w) for w in CALL_STOPWORDS)
        if custom_stopwords:
            stopwords_set.update(stemmer.stem(w.lower()) for w in custom_stopwords)

        logger.info(f"Loaded {len(stopwords_set)} stopwords")
        return stopwords_set
