# laundrylink/db/models.py
"""
Supabase does not require ORM model classes.
Tables live in the Supabase project, guarded by row-level security:

Table: bookings
- id (uuid, PK)
- user_id (uuid)
- booking_date (date)
- time_slot (text, "HH:MM - HH:MM")
- service_type (text)
- machine_id (text, FK → machines.id)
- status (text: upcoming | completed | cancelled)
- cost (numeric, nullable)
- created_at (timestamptz)

Table: laundry_orders
- id (uuid, PK)
- user_id (uuid)
- machine_id (text)
- machine_type (enum machine_type: washer | dryer)
- status (enum order_status: queued | washing | drying | ready_for_pickup | completed)
- service_type (text)
- created_at, updated_at (timestamptz)
- estimated_completion, actual_completion (timestamptz, nullable)

Table: machines
- id (text, PK)
- name (text)
- type (text: washer | dryer)
- location (text, nullable)
- is_active (bool, nullable)
- current_order_id (uuid, nullable, FK → laundry_orders.id)
- qr_code (text, nullable)
- status (text, e.g. "Available", "In Use")

Table: profiles
- id (uuid, PK, same as auth.users.id)
- full_name, email, phone, room_number, student_id (text, nullable)
- role (enum user_role: student | admin)
- created_at, updated_at (timestamptz)

Table: user_wallets
- id (uuid, PK)
- user_id (uuid)
- balance (numeric)

Table: wallet_transactions
- id (uuid, PK)
- wallet_id (uuid, FK → user_wallets.id)
- user_id (uuid)
- type (text: credit | debit)
- amount (numeric)
- description (text, nullable)
- booking_id (uuid, nullable, FK → bookings.id)
- created_at (timestamptz)

Table: notifications
- id (uuid, PK)
- user_id (uuid)
- title, message, type (text)
- sent_at, read_at, created_at (timestamptz, nullable)

Table: services
- id (int, PK)
- name (text)
- price (numeric)
- description (text, nullable)
"""

from typing import Literal

BOOKINGS = "bookings"
LAUNDRY_ORDERS = "laundry_orders"
MACHINES = "machines"
PROFILES = "profiles"
WALLETS = "user_wallets"
WALLET_TRANSACTIONS = "wallet_transactions"
NOTIFICATIONS = "notifications"
SERVICES = "services"

OrderStatus = Literal["queued", "washing", "drying", "ready_for_pickup", "completed"]
BookingStatus = Literal["upcoming", "completed", "cancelled"]
UserRole = Literal["student", "admin"]
TransactionType = Literal["credit", "debit"]

# PostgREST code returned by .single() when no row matched
NO_ROWS_CODE = "PGRST116"
