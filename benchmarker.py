import time
from concurrent.futures import ThreadPoolExecutor

import mysql.connector
from loguru import logger
from pymongo import MongoClient
from pymongo.errors import PyMongoError
import matplotlib.pyplot as plt

import schema
import seed_data
from errors import ConnectivityError, query_errors
from utils import divide_chunks, to_ms


class CafeBenchmark:
    """Seed the café data set into MySQL and MongoDB and time insert and read.

    Phases run in a fixed order from :meth:`run`: reset both stores, populate
    both, read both, then close every connection whatever happened before.
    """

    def __init__(self, mysql_config, mongo_config, threads=10):
        self.mysql_config = mysql_config
        self.mongo_config = mongo_config
        self.threads = threads

        self.mysql_conn = None
        self.mysql_cursor = None
        self.mongo_client = None
        self.mongo_db = None

        # label -> [mysql seconds, mongo seconds]
        self.timings = {}

    @property
    def results(self):
        return [(label, times[0], times[1]) for label, times in self.timings.items()]

    def _record(self, label, store_index, elapsed):
        self.timings.setdefault(label, [None, None])[store_index] = elapsed

    def connect(self):
        # MySQL setup
        try:
            self.mysql_conn = mysql.connector.connect(**self.mysql_config)
        except mysql.connector.Error as e:
            raise ConnectivityError("MySQL", e) from e
        self.mysql_cursor = self.mysql_conn.cursor(dictionary=True)

        # MongoDB setup, MongoClient connects lazily so ping to fail early
        try:
            self.mongo_client = MongoClient(self.mongo_config["uri"])
            self.mongo_client.admin.command("ping")
        except PyMongoError as e:
            raise ConnectivityError("MongoDB", e) from e
        self.mongo_db = self.mongo_client[self.mongo_config["db"]]

    def _collection(self, name):
        return self.mongo_db[self.mongo_config[name]]

    # ---------------------- Reset ----------------------

    def reset_mysql_schema(self):
        with query_errors("MySQL", "schema reset"):
            for table in schema.DROP_TABLES:
                self.mysql_cursor.execute(schema.drop_statement(table))
            for statement in schema.CREATE_STATEMENTS:
                self.mysql_cursor.execute(statement)
            self.mysql_conn.commit()
        logger.info("MySQL initialized.")

    def reset_mongo(self):
        with query_errors("MongoDB", "collection reset"):
            for name in ("customers", "menu", "orders"):
                self._collection(name).delete_many({})
        logger.info("MongoDB initialized.")

    # ---------------------- Populate ----------------------

    def _insert_mysql(self, query, batch):
        try:
            conn = mysql.connector.connect(**self.mysql_config)
        except mysql.connector.Error as e:
            raise ConnectivityError("MySQL", e) from e
        cursor = conn.cursor()
        try:
            for record in batch:
                cursor.execute(query, record)
            conn.commit()
        finally:
            cursor.close()
            conn.close()
        logger.debug(f"inserted {len(batch)} rows on a worker connection")

    def _fan_out_mysql(self, query, rows):
        chunks = [chunk for chunk in divide_chunks(rows, self.threads) if chunk]
        with query_errors("MySQL", "batch insert"):
            with ThreadPoolExecutor(max_workers=self.threads) as executor:
                futures = [executor.submit(self._insert_mysql, query, chunk) for chunk in chunks]
                for future in futures:
                    future.result()

    def populate_mysql(self):
        start = time.perf_counter()

        self._fan_out_mysql(schema.INSERT_CUSTOMER, seed_data.customer_rows())

        with query_errors("MySQL", "table insert"):
            for row in seed_data.table_rows():
                self.mysql_cursor.execute(schema.INSERT_TABLE, row)
            self.mysql_conn.commit()

        self._fan_out_mysql(schema.INSERT_PRODUCT, seed_data.product_rows())

        with query_errors("MySQL", "order insert"):
            for _ in range(seed_data.ORDER_COUNT):
                self.mysql_cursor.execute(schema.INSERT_ORDER, seed_data.order_row())
                order_id = self.mysql_cursor.lastrowid
                for item in seed_data.order_item_rows(order_id):
                    self.mysql_cursor.execute(schema.INSERT_ORDER_ITEM, item)
                self.mysql_conn.commit()

        duration = time.perf_counter() - start
        self._record("Insert", 0, duration)
        logger.info(f"MySQL insert time: {to_ms(duration):.2f} ms")
        return duration

    def populate_mongo(self):
        customers = self._collection("customers")
        menu = self._collection("menu")
        orders = self._collection("orders")

        start = time.perf_counter()
        with query_errors("MongoDB", "insert"):
            customers.insert_many(seed_data.customer_documents())
            menu.insert_many(seed_data.menu_documents())
            for _ in range(seed_data.ORDER_COUNT):
                orders.insert_one(seed_data.order_document())
        duration = time.perf_counter() - start

        self._record("Insert", 1, duration)
        logger.info(f"MongoDB insert time: {to_ms(duration):.2f} ms")
        return duration

    # ---------------------- Read ----------------------

    def _run_mysql_query(self, query):
        start = time.perf_counter()
        with query_errors("MySQL", "select"):
            self.mysql_cursor.execute(query)
            result = self.mysql_cursor.fetchall()
        elapsed = time.perf_counter() - start
        return elapsed, result

    def _run_mongo_find(self, collection):
        start = time.perf_counter()
        with query_errors("MongoDB", "find"):
            result = list(collection.find({}))
        elapsed = time.perf_counter() - start
        return elapsed, result

    def benchmark_mysql_read(self):
        elapsed, rows = self._run_mysql_query(schema.ORDER_DETAILS_QUERY)
        self._record("Select", 0, elapsed)
        logger.info(f"MySQL select time: {to_ms(elapsed):.2f} ms ({len(rows)} rows)")
        return elapsed, rows

    def benchmark_mongo_read(self):
        elapsed, docs = self._run_mongo_find(self._collection("orders"))
        self._record("Select", 1, elapsed)
        logger.info(f"MongoDB find time: {to_ms(elapsed):.2f} ms ({len(docs)} docs)")
        return elapsed, docs

    # ---------------------- Verification ----------------------

    def mysql_counts(self):
        counts = {}
        with query_errors("MySQL", "count"):
            for table in schema.TABLES:
                self.mysql_cursor.execute(schema.count_statement(table))
                counts[table] = self.mysql_cursor.fetchone()["total"]
        return counts

    def mongo_counts(self):
        with query_errors("MongoDB", "count"):
            return {
                name: self._collection(name).count_documents({})
                for name in ("customers", "menu", "orders")
            }

    # ---------------------- Orchestration ----------------------

    def run(self):
        """Run every phase once; return whether all of them completed and every handle was released."""
        try:
            self.connect()
            self.reset_mysql_schema()
            self.reset_mongo()
            self.populate_mysql()
            self.populate_mongo()
            self.benchmark_mysql_read()
            self.benchmark_mongo_read()
            completed = True
        except Exception as e:
            logger.exception(f"Benchmark aborted: {e}")
            completed = False
        finally:
            released = self.close()
        return completed and released

    def plot_results(self, name: str):
        names = [r[0] for r in self.results]
        mysql_times = [to_ms(r[1] or 0) for r in self.results]
        mongo_times = [to_ms(r[2] or 0) for r in self.results]

        x = range(len(names))
        width = 0.35

        fig, ax = plt.subplots(figsize=(8, 5))
        mysql_bars = ax.bar([i - width / 2 for i in x], mysql_times, width, label="MySQL")
        mongo_bars = ax.bar([i + width / 2 for i in x], mongo_times, width, label="MongoDB")

        ax.set_ylabel('Execution Time (ms)')
        ax.set_title('Café Data Set: MySQL vs MongoDB')
        ax.set_xticks(list(x))
        ax.set_xticklabels(names)
        ax.legend()

        # Add time labels on top of each bar
        def add_labels(bars, times):
            for bar, elapsed in zip(bars, times):
                height = bar.get_height()
                ax.annotate(f'{elapsed:.2f}',
                            xy=(bar.get_x() + bar.get_width() / 2, height),
                            xytext=(0, 3),  # offset
                            textcoords="offset points",
                            ha='center', va='bottom', fontsize=8)

        add_labels(mysql_bars, mysql_times)
        add_labels(mongo_bars, mongo_times)

        plt.tight_layout()
        plt.savefig(f"{name}.png", dpi=300, bbox_inches='tight')
        plt.close(fig)

    def close(self):
        """Release every open handle; return False if any of them failed to close."""
        released = True
        handles = [
            ("MySQL cursor", self.mysql_cursor),
            ("MySQL connection", self.mysql_conn),
            ("MongoDB client", self.mongo_client),
        ]
        for name, handle in handles:
            if handle is None:
                continue
            try:
                handle.close()
            except Exception as e:
                logger.exception(f"Failed to close {name}: {e}")
                released = False
        self.mysql_cursor = None
        self.mysql_conn = None
        self.mongo_client = None
        self.mongo_db = None
        return released
