from clients import mysql_config, mongo_config
from benchmarker import CafeBenchmark

if __name__ == "__main__":
    benchmark = CafeBenchmark(mysql_config, mongo_config)

    # Run and show results
    if benchmark.run():
        benchmark.plot_results("cafe_benchmark")
