"""Domain packages: accounts, activities, catalog, wallets and orders."""
