"""
Mortgage Default Modeling — Workflow Dashboard
==============================================

Walks the teaching workflow end to end:
  1. Data:       simulate the mortgage-default dataset (or open a parquet/csv file)
  2. Partition:  random train/validate split in one pass
  3. Train:      one or more algorithms on the same formula
  4. Score:      predict the validation partition
  5. Evaluate:   overlaid ROC curves and an AUC table

Run: streamlit run app/streamlit_app.py
"""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path
from typing import Dict, List

import pandas as pd
import streamlit as st
from loguru import logger

# ---------------------------------------------------------------------------
# Make project root importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.errors import ConfigurationError, DataError, DatasetIOError
from core.log import configure_logging
from core.schema import MORTGAGE_DEFAULT_LEVELS, MORTGAGE_RESPONSE

from data_prep.dataset import DatasetHandle
from data_prep.formula import build_formula
from data_prep.loader import open_mortgage_dataset
from data_prep.partition import partition
from data_prep.simulate import write_mortgage_dataset
from data_prep.summary import summarize_dataset
from data_prep.validators import validate_mortgage_dataset

from engine.scorer import score
from engine.trainer import train

from evaluation.plots import plot_roc
from evaluation.roc import auc_summary, compute_roc

from models.base import Algorithm

# ---------------------------------------------------------------------------
# Algorithm presets shown in the sidebar
# ---------------------------------------------------------------------------
CLASSIFIER_PRESETS: dict[str, dict[str, object]] = {
    "Logistic regression": {
        "algorithm": Algorithm.LOGISTIC,
        "options": {},
    },
    "Decision tree": {
        "algorithm": Algorithm.DECISION_TREE,
        "options": {"max_depth": 6, "min_samples_leaf": 20, "random_state": 7},
    },
    "Random forest": {
        "algorithm": Algorithm.RANDOM_FOREST,
        "options": {"n_estimators": 200, "min_samples_leaf": 10, "random_state": 7},
    },
    "Gradient boosting": {
        "algorithm": Algorithm.GRADIENT_BOOSTING,
        "options": {"max_iter": 150, "learning_rate": 0.05, "random_state": 7},
    },
}

POSITIVE_LEVEL = MORTGAGE_DEFAULT_LEVELS[-1]


def _workdir() -> Path:
    if "workdir" not in st.session_state:
        st.session_state["workdir"] = tempfile.mkdtemp(prefix="mortgage_default_")
    return Path(st.session_state["workdir"])


def _source_dataset(mode: str, n_rows: int, data_seed: int, path_text: str, fmt: str) -> DatasetHandle:
    if mode == "Simulate":
        target = _workdir() / f"mortgage_default.{fmt}"
        return write_mortgage_dataset(target, n_rows, seed=data_seed, block_size=50_000)
    return open_mortgage_dataset(path_text)


def _run_workflow(
    source: DatasetHandle,
    *,
    p_train: float,
    split_seed: int,
    exclude: List[str],
    chosen: List[str],
) -> Dict[str, object]:
    parts = partition(source, [("train", p_train), ("validate", 1.0 - p_train)], seed=split_seed,
                      out_dir=_workdir())
    formula = build_formula(parts["train"], MORTGAGE_RESPONSE, exclude=exclude)

    curves = {}
    models = {}
    for label in chosen:
        preset = CLASSIFIER_PRESETS[label]
        model = train(formula, parts["train"], preset["algorithm"], preset["options"])
        scored = score(
            model,
            parts["validate"],
            _workdir() / f"scored_{preset['algorithm'].value}.parquet",
            extra_columns_to_copy=[MORTGAGE_RESPONSE],
        )
        curves[label] = compute_roc(MORTGAGE_RESPONSE, f"pred_{POSITIVE_LEVEL}", scored, positive=POSITIVE_LEVEL)
        models[label] = model

    return {
        "formula": formula,
        "sizes": {name: h.num_rows for name, h in parts.items()},
        "models": models,
        "curves": curves,
    }


def main() -> None:
    configure_logging()
    st.set_page_config(page_title="Mortgage Default Models", layout="wide")
    st.title("Mortgage Default Modeling")

    # ---------------------------------------------------------------
    # Sidebar: data, partition and model settings
    # ---------------------------------------------------------------
    with st.sidebar:
        st.header("Data")
        mode = st.radio("Source", ["Simulate", "Open file"], horizontal=True)
        n_rows = st.number_input("Rows to simulate", 1_000, 5_000_000, 100_000, 10_000)
        data_seed = st.number_input("Simulation seed", 0, 10_000, 42, 1)
        fmt = st.selectbox("Storage format", ["parquet", "csv"])
        path_text = st.text_input("File path (parquet or csv)", "")

        st.header("Partition")
        p_train = st.slider("Train share", 0.05, 0.95, 0.75, 0.05)
        split_seed = st.number_input("Split seed", 0, 10_000, 7, 1)

        st.header("Models")
        chosen = st.multiselect("Algorithms", list(CLASSIFIER_PRESETS), default=list(CLASSIFIER_PRESETS)[:2])
        exclude = st.multiselect("Exclude features", ["creditScore", "houseAge", "yearsEmploy", "ccDebt", "year"],
                                 default=["year"])

        run = st.button("Run workflow", type="primary", use_container_width=True)

    if not run:
        st.info("Choose settings in the sidebar and click 'Run workflow'.")
        return
    if not chosen:
        st.warning("Pick at least one algorithm.")
        return

    try:
        with st.spinner("Preparing data..."):
            source = _source_dataset(mode, int(n_rows), int(data_seed), path_text, fmt)
            preview = next(source.iter_blocks(), pd.DataFrame())
            validation = validate_mortgage_dataset(preview)

        st.subheader("Data")
        c1, c2 = st.columns([2, 1])
        with c1:
            st.dataframe(summarize_dataset(source), use_container_width=True)
        with c2:
            st.metric("Rows", f"{source.num_rows:,}")
            st.code(validation.summary())
        if not validation.is_valid:
            st.error("Dataset failed validation; fix the errors above first.")
            return

        with st.spinner("Partitioning, training and scoring..."):
            results = _run_workflow(
                source, p_train=float(p_train), split_seed=int(split_seed), exclude=exclude, chosen=chosen,
            )
    except (ConfigurationError, DataError, DatasetIOError) as exc:
        logger.error("Workflow failed: {}", exc)
        st.error(str(exc))
        return

    st.subheader("Partitions")
    st.write(results["sizes"])
    st.markdown(f"**Formula:** `{results['formula']}`")

    st.subheader("Validation ROC")
    left, right = st.columns([3, 2])
    with left:
        st.pyplot(plot_roc(results["curves"], title="Validation partition"))
    with right:
        st.dataframe(auc_summary(results["curves"]), use_container_width=True)
        for label, model in results["models"].items():
            st.caption(f"{label}: {model.describe()}")


def launch() -> None:
    """Console entry point: start the dashboard under streamlit."""
    from streamlit.web import cli as stcli

    sys.argv = ["streamlit", "run", str(Path(__file__).resolve())]
    sys.exit(stcli.main())


if __name__ == "__main__":
    main()
