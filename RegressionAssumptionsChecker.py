from RegressionOverlay import RegressionOverlay


class RegressionAssumptionsChecker:

    # result key -> verdict flag inside that result
    VERDICTS = {
        "linearity": "linearity",
        "heteroscedasticity": "homoscedasticity",
        "independence": "independence",
        "normality": "normality",
    }

    def __init__(self, df, target, covariate=None, scheme="both", visualize=False):
        self.df = df
        self.target = target
        self.scheme = scheme
        self.regression_overlay = RegressionOverlay(df, target, visualize, covariate=covariate)
        self.results = {}
        self.report = {}

    # =======================================
    # Orchestrator
    # =======================================
    def check_assumptions(self):
        """Fit OLS and run the linearity, variance, independence and normality checks."""
        self.results = {}

        self.results["linearity"] = self.regression_overlay.check_linearity()
        self.results["heteroscedasticity"] = self.regression_overlay.check_heteroscedasticity(self.scheme)
        self.results["independence"] = self.regression_overlay.check_independence()
        self.results["normality"] = self.regression_overlay.check_residual_normality()

        violated = [name for name, flag in self.VERDICTS.items() if not self.results[name][flag]]

        if violated:
            self.results["status"] = "unsuitable"
            self.results["reason"] = (
                f"OLS is not suitable because these assumptions are violated: {', '.join(violated)}. "
                "Consider a location-scale-shape regression (GAMLSS) that models the variance "
                "explicitly, or robust standard errors."
            )
        else:
            self.results["status"] = "suitable"
            self.results["reason"] = "All classical linear-model assumptions hold."

        self.report["assumptions"] = self.results
        return self.results

    def help_assumptions(self):
        print('RegressionAssumptionsChecker')
        print('Checks OLS assumptions on the data:')
        print('linearity (RESET), homoscedasticity (score test, studentized Breusch-Pagan, MAD/median regressograms)')
        print('independence (Durbin-Watson), normality (Shapiro-Wilk)')

    def export_report(self, format="dict"):
        if format == "json":
            import json
            return json.dumps(self.report, indent=2, allow_nan=False)
        return self.report

    def report_assumptions(self):
        print("\n🔍 Assumption Diagnostics Report")
        print("=" * 40)

        assumptions = self.report.get("assumptions", self.results)

        for key, result in assumptions.items():
            print(f"\n🧠 {key.replace('_', ' ').title()}")
            print("-" * 30)

            if isinstance(result, dict):
                for subkey, value in result.items():
                    if subkey == "regressograms":
                        for name, rows in value.items():
                            print(f"{name}: {len(rows)} bins")
                    else:
                        print(f"{subkey}: {value}")
            else:
                print(result)
