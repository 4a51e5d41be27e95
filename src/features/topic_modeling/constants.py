"""
Topic Modeling Constants

Persistence filenames, feature naming and corpus-size guards for LDA
topic modeling of earnings-call transcripts. Model hyperparameters live in
configs/features/topic_modeling.yaml.
"""

from typing import List

# ===========================
# Module Version
# ===========================
TOPIC_MODELING_MODULE_VERSION = "0.2.0"

# ===========================
# Topic Count Selection
# ===========================
MIN_HOLDOUT_DOCUMENTS = 1

# ===========================
# Model Persistence
# ===========================
LDA_MODEL_FILENAME = "lda_model.pkl"
"""Filename for saved LDA model"""

DICTIONARY_FILENAME = "lda_dictionary.pkl"
"""Filename for saved gensim Dictionary"""

MODEL_INFO_FILENAME = "model_info.json"

TOPIC_TERMS_FILENAME = "topic_top_terms.json"

# ===========================
# Feature Engineering
# ===========================
TOPIC_FEATURE_PREFIX = "topic_"
"""Prefix for topic exposure features (e.g., topic_0, topic_1, ...)"""

PROBABILITY_TOLERANCE = 0.01
"""Allowed deviation of a document's topic probabilities from 1"""

# ===========================
# Training Recommendations
# ===========================
RECOMMENDED_MIN_CORPUS_SIZE = 200
"""Minimum number of transcripts recommended for training LDA"""


def topic_column(topic_id: int) -> str:
    """Feature column name for a topic id."""
    return f"{TOPIC_FEATURE_PREFIX}{topic_id}"


def topic_columns(num_topics: int) -> List[str]:
    return [topic_column(i) for i in range(num_topics)]
