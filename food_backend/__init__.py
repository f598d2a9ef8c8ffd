"""Backend Mama Food's: checkout Stripe, webhook signé et e-mails de commande."""
