from laundrylink.main import main

main()
