# Fixed criteria for the quarterly best-employee rating, scored 1-5 each.
TRIWULAN_CRITERIA = [
    "Memiliki gagasan dan ide-ide kreatif dalam pelaksanaan pekerjaan",
    "Selalu tuntas dan bahkan melebihi target",
    "Memiliki Komitmen menaati ketentuan masuk kerja dan jam kerja",
    "Dapat diteladani dalam melaksanakan tanggung jawab dan tugasnya",
    "Menjadi inspirasi bagi rekan sejawat",
    "Amanah dalam pelaksanaan tugasnya",
    "Kemampuan bekerja sama dalam tim, responsif dan solutif",
    "Melakukan inovasi yang bermanfaat",
    "Memiliki prestasi berdampak positif bagi instansi",
    "Membangun lingkungan kerja yang kondusif",
    "Menunjukkan loyalitas terhadap Organisasi",
    "Mampu menyesuaikan diri (adaptif)",
    "Mampu memberikan pengaruh positif",
]
