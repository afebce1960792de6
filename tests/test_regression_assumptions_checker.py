import json

from RegressionAssumptionsChecker import RegressionAssumptionsChecker


class TestRegressionAssumptionsChecker:

    def test_heteroscedastic_data_is_unsuitable(self, heteroscedastic_df):
        checker = RegressionAssumptionsChecker(heteroscedastic_df, "y")
        results = checker.check_assumptions()

        assert set(results) == {
            "linearity", "heteroscedasticity", "independence", "normality", "status", "reason",
        }
        assert results["status"] == "unsuitable"
        assert "heteroscedasticity" in results["reason"]

    def test_report_holds_results(self, heteroscedastic_df):
        checker = RegressionAssumptionsChecker(heteroscedastic_df, "y", scheme="uniform")
        results = checker.check_assumptions()

        assert checker.export_report()["assumptions"] is results
        assert set(results["heteroscedasticity"]["regressograms"]) == {
            "covariate_uniform", "residual_uniform",
        }

    def test_json_export(self, heteroscedastic_df):
        checker = RegressionAssumptionsChecker(heteroscedastic_df, "y")
        checker.check_assumptions()

        report = json.loads(checker.export_report(format="json"))
        assert report["assumptions"]["status"] == "unsuitable"
        assert len(report["assumptions"]["heteroscedasticity"]["regressograms"]["covariate_quantile"]) == 10

    def test_report_assumptions_prints(self, heteroscedastic_df, capsys):
        checker = RegressionAssumptionsChecker(heteroscedastic_df, "y")
        checker.check_assumptions()
        checker.report_assumptions()

        out = capsys.readouterr().out
        assert "Assumption Diagnostics Report" in out
        assert "covariate_uniform:" in out
        assert "Status" in out

    def test_help(self, homoscedastic_df, capsys):
        RegressionAssumptionsChecker(homoscedastic_df, "y").help_assumptions()
        assert "Durbin-Watson" in capsys.readouterr().out

    def test_json_export_with_undefined_dispersion_is_strict(self, zero_median_df):
        def reject(token):
            raise ValueError(f"non-standard JSON constant {token}")

        checker = RegressionAssumptionsChecker(zero_median_df, "y", scheme="uniform")
        results = checker.check_assumptions()

        assert results["heteroscedasticity"]["regressograms"]["covariate_uniform"][0]["dispersion"] is None

        report = json.loads(checker.export_report(format="json"), parse_constant=reject)
        rows = report["assumptions"]["heteroscedasticity"]["regressograms"]["covariate_uniform"]
        assert rows[0]["dispersion"] is None
        assert all(row["dispersion"] is not None for row in rows[1:])
