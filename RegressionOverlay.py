import statsmodels.api as sm
from statsmodels.stats.diagnostic import linear_reset
from statsmodels.stats.diagnostic import het_breuschpagan
from statsmodels.stats.stattools import durbin_watson

import numpy as np
import warnings
from scipy.stats import shapiro

import matplotlib.pyplot as plt
import seaborn as sns

from DispersionRegressogram import compute_regressogram, UndefinedDispersionWarning


class RegressionOverlay:

    ALPHA = 0.05              # significance level for every hypothesis test
    DW_BOUNDS = (1.5, 2.5)    # Durbin-Watson range read as "no serial correlation"

    def __init__(self, df, target, visualize=False, covariate=None):
        self.df = df
        self.target = target
        self.visualize = visualize
        self.X = df.drop(columns=[target])
        self.y = df[target]
        self.covariate = covariate if covariate is not None else self.X.columns[0]
        self._model = None

    def fit_ols(self):
        if self._model is None:
            X_const = sm.add_constant(self.X)
            self._model = sm.OLS(self.y, X_const).fit()
        return self._model

    # =======================================
    # Individual checks
    # =======================================
    def check_linearity(self):
        model = self.fit_ols()
        reset_test = linear_reset(model, power=2, use_f=True)
        p_value = float(reset_test.pvalue)

        if self.visualize:
            plt.figure(figsize=(8, 5))
            sns.residplot(x=model.fittedvalues, y=model.resid, lowess=True,
                          line_kws={"color": "red"})
            plt.title("Residuals vs Fitted")
            plt.xlabel("Fitted values")
            plt.ylabel("Residuals")
            plt.tight_layout()
            plt.show()

        return {
            "linearity": p_value >= self.ALPHA,
            "p_value": p_value,
            "notes": "Linearity assumption holds." if p_value >= self.ALPHA else "Non-linearity detected."
        }

    def check_heteroscedasticity(self, scheme="both"):
        """
        Score test against the fitted values, studentized Breusch-Pagan against
        the regressors, and MAD/median regressograms for both the raw covariate
        and the residuals.

        Parameters:
        - scheme: "uniform", "quantile" or "both"

        Returns:
        - dict with homoscedasticity flag, both test results, regressogram tables and notes
        """
        model = self.fit_ols()

        # non-constant variance score test: variance modelled on the fitted values
        score_stat, score_pvalue, _, _ = het_breuschpagan(
            model.resid, sm.add_constant(model.fittedvalues.to_numpy()), robust=False
        )
        bp_stat, bp_pvalue, _, _ = het_breuschpagan(model.resid, model.model.exog, robust=True)

        homoscedastic = score_pvalue >= self.ALPHA and bp_pvalue >= self.ALPHA

        schemes = ["uniform", "quantile"] if scheme == "both" else [scheme]
        regressograms = {}
        for s in schemes:
            regressograms[f"covariate_{s}"] = self.regressogram(
                self.X[self.covariate], self.y, scheme=s,
                label=f"{self.covariate} vs {self.target}",
            )
            regressograms[f"residual_{s}"] = self.regressogram(
                model.fittedvalues, model.resid, scheme=s, label="fitted vs residuals",
            )

        if homoscedastic:
            notes = "Homoscedasticity assumption holds."
        elif score_pvalue < self.ALPHA and bp_pvalue < self.ALPHA:
            notes = "Residuals are heteroscedastic (score test and studentized Breusch-Pagan)."
        elif score_pvalue < self.ALPHA:
            notes = "Residual variance changes with the fitted values (score test)."
        else:
            notes = "Residual variance depends on the regressors (studentized Breusch-Pagan)."

        return {
            "homoscedasticity": bool(homoscedastic),
            "score_test": {"statistic": float(score_stat), "p_value": float(score_pvalue)},
            "studentized_bp": {"statistic": float(bp_stat), "p_value": float(bp_pvalue)},
            "regressograms": {
                key: self.to_records(table) for key, table in regressograms.items()
            },
            "notes": notes
        }

    def check_independence(self):
        model = self.fit_ols()
        dw = float(durbin_watson(model.resid))
        low, high = self.DW_BOUNDS
        independent = low <= dw <= high

        if independent:
            notes = "No serial correlation in residuals."
        elif dw < low:
            notes = "Positive serial correlation in residuals."
        else:
            notes = "Negative serial correlation in residuals."

        return {
            "independence": independent,
            "durbin_watson": dw,
            "notes": notes
        }

    def check_residual_normality(self):
        model = self.fit_ols()
        stat, p_value = shapiro(model.resid)
        p_value = float(p_value)

        if self.visualize:
            sm.qqplot(model.resid, line='s')
            plt.title("Q-Q Plot of Residuals")
            plt.show()

        return {
            "normality": p_value >= self.ALPHA,
            "statistic": float(stat),
            "p_value": p_value,
            "notes": "Residuals appear normal." if p_value >= self.ALPHA else "Residuals deviate from normality."
        }

    # =======================================
    # Regressogram
    # =======================================
    def regressogram(self, x, y, scheme="uniform", probability_grid=None, bins=None, label=None):
        with warnings.catch_warnings():
            # zero-median bins stay in the table as inf/nan
            warnings.simplefilter("ignore", category=UndefinedDispersionWarning)
            table = compute_regressogram(x, y, scheme=scheme, probability_grid=probability_grid, bins=bins)

        if self.visualize:
            finite = table[np.isfinite(table["dispersion"].to_numpy(dtype=float))]
            plt.figure(figsize=(8, 5))
            sns.lineplot(data=finite, x="midpoint", y="dispersion", marker="o", drawstyle="steps-mid")
            plt.title(f"MAD / median regressogram ({scheme} bins){': ' + label if label else ''}")
            plt.xlabel("Bin midpoint")
            plt.ylabel("MAD / median")
            plt.tight_layout()
            plt.show()

        return table

    @staticmethod
    def to_records(table):
        """Regressogram rows as plain dicts; undefined (inf/nan) dispersions become None."""
        records = table.to_dict(orient="records")
        for row in records:
            if not np.isfinite(row["dispersion"]):
                row["dispersion"] = None
        return records
