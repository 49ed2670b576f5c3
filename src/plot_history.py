import os
import re

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd


GENERATION_FILE = re.compile(r"^generation_(\d+)\.csv$")
STATISTICS_FILE = "generation_statistics.csv"


class EvolutionVisualizer:
    def __init__(self, csv_directory, plots_directory=None):
        """
        Initialize the visualizer with the directory holding the generation CSV
        files written by the reporter.
        """
        self.csv_directory = csv_directory
        self.plots_directory = plots_directory or os.path.join(csv_directory, "plots")
        self.data = self._load_all_csv()
        self.statistics = self._load_statistics()

        os.makedirs(self.plots_directory, exist_ok=True)

    def _load_all_csv(self):
        """
        Load every generation_<n>.csv into a dictionary keyed by generation number.
        """
        data = {}
        for file in os.listdir(self.csv_directory):
            match = GENERATION_FILE.match(file)
            if match:
                data[int(match.group(1))] = pd.read_csv(
                    os.path.join(self.csv_directory, file), dtype={"Candidate": str})

        return dict(sorted(data.items()))

    def _load_statistics(self):
        path = os.path.join(self.csv_directory, STATISTICS_FILE)
        if not os.path.exists(path):
            return pd.DataFrame()
        return pd.read_csv(path).sort_values(by="generation")

    def best_candidates(self):
        """
        Best candidate of every generation (lowest selection performance).
        """
        rows = []
        for gen, df in self.data.items():
            df = df.copy()
            df["Selection_Performance"] = pd.to_numeric(df["Selection_Performance"], errors="coerce")
            df = df.dropna(subset=["Selection_Performance"]).sort_values(by="Selection_Performance")
            if df.empty:
                continue
            best = df.iloc[0]
            rows.append({"generation": gen,
                         "candidate": best["Candidate"],
                         "inputs_number": int(best["Inputs_Number"]),
                         "selection_performance": float(best["Selection_Performance"])})

        return pd.DataFrame(rows, columns=["generation", "candidate", "inputs_number", "selection_performance"])

    def plot_selection_statistics(self):
        """
        Plot minimum, mean and optimum selection performance across generations,
        with the standard deviation as a band around the mean.
        """
        if self.statistics.empty:
            return None

        stats = self.statistics
        generations = stats["generation"]

        plt.figure(figsize=(10, 6))
        plt.plot(generations, stats["minimum_selection"], marker="o", linestyle="-", color="b", label="Minimum")
        plt.plot(generations, stats["mean_selection"], marker="o", linestyle="-", color="g", label="Mean")
        plt.fill_between(generations,
                         stats["mean_selection"] - stats["standard_deviation_selection"],
                         stats["mean_selection"] + stats["standard_deviation_selection"],
                         color="g", alpha=0.2)
        plt.plot(generations, stats["optimum_selection"], linestyle="--", color="r", label="Optimum")
        plt.title("Selection Performance Across Generations")
        plt.xlabel("Generation")
        plt.ylabel("Selection Performance")
        plt.legend()
        plt.grid(True)

        path = os.path.join(self.plots_directory, "selection_performance.png")
        plt.savefig(path)
        plt.close()
        return path

    def plot_inputs_number(self):
        """
        Plot the average number of selected inputs across generations.
        """
        if not self.data:
            return None

        generations = list(self.data.keys())
        mean_inputs = [df["Inputs_Number"].mean() for df in self.data.values()]

        plt.figure(figsize=(10, 6))
        plt.plot(generations, mean_inputs, marker="o", linestyle="-", color="m", label="Mean Inputs Number")
        plt.title("Selected Inputs Across Generations")
        plt.xlabel("Generation")
        plt.ylabel("Inputs Number")
        plt.grid(True)

        path = os.path.join(self.plots_directory, "inputs_number.png")
        plt.savefig(path)
        plt.close()
        return path

    def plot_all(self):
        """Create every plot, returning the paths written."""
        paths = [self.plot_selection_statistics(), self.plot_inputs_number()]
        return [path for path in paths if path]
