"""Rating Report — batch comparison of rework and official star ratings.

Sub-package containing:
    dataset    – chart JSON loading and validation
    evaluator  – per-chart scoring, ranked tables, rating agreement
    main       – ``strain-rating`` command-line entry point
"""
