"""
SEC Filing Analyzer - Test Suite

Test modules organized by functionality:
- test_preprocessing/ - Parser, extractor, cleaner, segmenter tests
- test_features/ - Sentiment, readability, topic modeling tests
- test_analysis/ - Classification, inference tests
- test_integration/ - End-to-end pipeline tests
"""
