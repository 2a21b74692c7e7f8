# `tables` is a reserved word in MySQL, so every identifier is quoted.

# Children before parents.
DROP_TABLES = ["order_items", "orders", "products", "customers", "tables"]

CREATE_STATEMENTS = [
    """
    CREATE TABLE `customers` (
        id INT AUTO_INCREMENT PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        phone VARCHAR(20)
    )
    """,
    """
    CREATE TABLE `tables` (
        id INT AUTO_INCREMENT PRIMARY KEY,
        number INT NOT NULL,
        status VARCHAR(10) NOT NULL CHECK (status IN ('free', 'occupied'))
    )
    """,
    """
    CREATE TABLE `products` (
        id INT AUTO_INCREMENT PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        category VARCHAR(20) NOT NULL,
        price DECIMAL(10, 2) NOT NULL
    )
    """,
    """
    CREATE TABLE `orders` (
        id INT AUTO_INCREMENT PRIMARY KEY,
        customer_id INT NOT NULL,
        table_id INT NOT NULL,
        order_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (customer_id) REFERENCES `customers` (id),
        FOREIGN KEY (table_id) REFERENCES `tables` (id)
    )
    """,
    """
    CREATE TABLE `order_items` (
        id INT AUTO_INCREMENT PRIMARY KEY,
        order_id INT NOT NULL,
        product_id INT NOT NULL,
        quantity INT NOT NULL,
        FOREIGN KEY (order_id) REFERENCES `orders` (id),
        FOREIGN KEY (product_id) REFERENCES `products` (id)
    )
    """,
]

# Parents before children, the reverse of DROP_TABLES.
TABLES = list(reversed(DROP_TABLES))

INSERT_CUSTOMER = "INSERT INTO `customers` (name, phone) VALUES (%s, %s)"
INSERT_TABLE = "INSERT INTO `tables` (number, status) VALUES (%s, %s)"
INSERT_PRODUCT = "INSERT INTO `products` (name, category, price) VALUES (%s, %s, %s)"
INSERT_ORDER = "INSERT INTO `orders` (customer_id, table_id) VALUES (%s, %s)"
INSERT_ORDER_ITEM = "INSERT INTO `order_items` (order_id, product_id, quantity) VALUES (%s, %s, %s)"

ORDER_DETAILS_QUERY = """
    SELECT c.name, o.id, p.name AS product_name, oi.quantity
    FROM `customers` c
    JOIN `orders` o ON c.id = o.customer_id
    JOIN `order_items` oi ON o.id = oi.order_id
    JOIN `products` p ON oi.product_id = p.id
"""


def drop_statement(table):
    return f"DROP TABLE IF EXISTS `{table}`"


def count_statement(table):
    return f"SELECT COUNT(*) AS total FROM `{table}`"
