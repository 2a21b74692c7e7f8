# Setup configs
mysql_config = {
    "host": "127.0.0.1",
    "port": 3306,
    "user": "root",
    "password": "rootpassword",  # Change this
    "database": "cafe_db"
}

mongo_config = {
    "uri": "mongodb://localhost:27017/",
    "db": "cafe",
    "customers": "customers",
    "menu": "menu",
    "orders": "orders"
}
